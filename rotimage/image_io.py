"""
Filesystem and codec collaborators: decode, encode, type sniffing, listing.
"""

import os
from pathlib import Path
from typing import Iterator, Sequence, Union

import cv2
import numpy as np

from .config.deskew_config import IMAGE_EXTENSIONS
from .errors import DecodeError, EncodeError, OutputSetupError

PathLike = Union[str, os.PathLike]


def is_image_file(path: PathLike, extensions: Sequence[str] = IMAGE_EXTENSIONS) -> bool:
    """
    Check if a path names an image based on its extension.

    The match is exact and case-sensitive, so ``scan.JPG`` is not an image.
    """
    return Path(path).suffix in extensions


def decode_image(path: PathLike) -> np.ndarray:
    """
    Load an image as a BGR array.

    Raises:
        DecodeError: If the file is missing or cannot be decoded
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        raise DecodeError(f"Could not open or find the image: {path}")
    return image


def encode_image(image: np.ndarray, path: PathLike) -> None:
    """
    Write an image, choosing the format from the path's extension.

    Raises:
        EncodeError: If OpenCV refuses or fails to write the file
    """
    try:
        written = cv2.imwrite(str(path), image)
    except cv2.error as e:
        raise EncodeError(f"Failed to write the image to: {path} ({e})") from e

    if not written:
        raise EncodeError(f"Failed to write the image to: {path}")


def iter_directory(path: PathLike) -> Iterator[os.DirEntry]:
    """
    Iterate over the direct entries of a directory.

    Returns the raw ``os.scandir`` iterator; advancing it may raise
    ``OSError`` part way through a listing.
    """
    return os.scandir(path)


def ensure_directory(path: PathLike) -> Path:
    """
    Create a directory tree if it does not exist yet.

    Raises:
        OutputSetupError: If the tree cannot be created
    """
    directory = Path(path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputSetupError(f"Failed to create output directory: {directory} ({e})") from e
    return directory
