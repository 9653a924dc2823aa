"""
Directory traversal for batch de-skewing.

Outputs are written flat into a single output directory, also for recursive
runs, so files with the same name in different subdirectories overwrite
each other.
"""

import logging
import os
from pathlib import Path
from typing import Callable, ContextManager, Iterator, Optional, Union

from ..config.deskew_config import DeskewConfig
from ..errors import TraversalError
from ..image_io import decode_image, encode_image, is_image_file, iter_directory
from .estimator import SkewEstimator
from .models import AngleSource, BatchResult, BatchStatus, TraversalContext
from .policy import AngleResolver, Decoder
from .processor import DeskewProcessor, Encoder

logger = logging.getLogger(__name__)

Lister = Callable[[Path], ContextManager[Iterator[os.DirEntry]]]
PathLike = Union[str, Path]


class BatchProcessor:
    """
    Rotates every image in a directory, optionally descending into subdirectories.

    Error policy:
    - A failed file aborts the directory it was listed in; the result of
      that level is FAILED.
    - A failed subdirectory does not stop its parent. The parent carries on
      and reports PARTIAL, which still counts as success.
    - Entries that cannot be read while listing are logged (when verbose)
      and skipped.

    Example:
        >>> batch = BatchProcessor()
        >>> result = batch.process("scans/", "out/", AngleSource.explicit(1.5))
        >>> result.status
        <BatchStatus.SUCCESS: 'success'>
    """

    def __init__(
        self,
        config: Optional[DeskewConfig] = None,
        estimator: Optional[SkewEstimator] = None,
        decoder: Decoder = decode_image,
        encoder: Encoder = encode_image,
        lister: Lister = iter_directory,
    ):
        """
        Initialize batch processor.

        Args:
            config: Run configuration
            estimator: Skew estimator used in auto mode
            decoder: Image decode collaborator
            encoder: Image encode collaborator
            lister: Directory listing collaborator, returns a context-managed
                iterator of ``os.DirEntry``-like objects
        """
        self.config = config or DeskewConfig()
        self.file_processor = DeskewProcessor(
            config=self.config,
            estimator=estimator,
            decoder=decoder,
            encoder=encoder,
        )
        self.lister = lister

    def process(
        self,
        input_dir: PathLike,
        output_dir: PathLike,
        source: AngleSource,
        recursive: bool = False,
        verbose: bool = False,
    ) -> BatchResult:
        """
        Process all images in a directory.

        Args:
            input_dir: Directory to scan
            output_dir: Existing directory receiving the rotated images
            source: Angle source decided for the run
            recursive: Descend into subdirectories
            verbose: Report listing problems

        Returns:
            BatchResult for ``input_dir`` with nested results for subdirectories
        """
        context = TraversalContext(
            input_dir=Path(input_dir),
            output_dir=Path(output_dir),
            angle_source=source,
            recursive=recursive,
            verbose=verbose,
        )
        resolver = self.file_processor.resolver_for(source)
        return self._traverse(context, resolver)

    def _traverse(self, context: TraversalContext, resolver: AngleResolver) -> BatchResult:
        """Process one directory level."""
        result = BatchResult(input_dir=str(context.input_dir))

        try:
            listing = self.lister(context.input_dir)
        except OSError as e:
            failure = TraversalError(f"Could not list directory {context.input_dir}: {e}")
            logger.error("%s", failure)
            result.listing_errors.append(str(failure))
            result.status = BatchStatus.FAILED
            return result

        with listing as entries:
            self._scan(entries, context, resolver, result)

        return result

    def _scan(
        self,
        entries: Iterator[os.DirEntry],
        context: TraversalContext,
        resolver: AngleResolver,
        result: BatchResult,
    ) -> None:
        """Walk the entries of one listing, filling ``result`` in place."""
        extensions = self.config.image_extensions
        consecutive_errors = 0

        while True:
            try:
                entry = next(entries)
            except StopIteration:
                break
            except OSError as e:
                consecutive_errors += 1
                self._listing_error(context, result, context.input_dir, e)
                if consecutive_errors >= self.config.max_listing_errors:
                    logger.warning(
                        "Giving up on %s after %d listing errors",
                        context.input_dir,
                        consecutive_errors,
                    )
                    break
                continue

            consecutive_errors = 0
            entry_path = Path(entry.path)

            try:
                is_dir = entry.is_dir()
            except OSError as e:
                self._listing_error(context, result, entry_path, e)
                continue

            if is_dir:
                if context.recursive:
                    child = self._traverse(context.for_subdirectory(entry_path), resolver)
                    result.nested.append(child)
                    if child.status != BatchStatus.SUCCESS:
                        logger.warning("Errors while processing subdirectory %s", entry_path)
                        result.status = BatchStatus.PARTIAL
                continue

            if not is_image_file(entry.name, extensions):
                continue

            output_path = context.output_dir / entry.name
            file_result = self.file_processor.process_entry(entry_path, output_path, resolver)
            result.results.append(file_result)

            if not file_result.success:
                logger.error("Failed to process image: %s", entry_path)
                result.status = BatchStatus.FAILED
                return

            logger.info("Processed %s", entry_path)

    def _listing_error(
        self,
        context: TraversalContext,
        result: BatchResult,
        path: Path,
        error: OSError,
    ) -> None:
        failure = TraversalError(f"Error accessing {path}: {error}")
        result.listing_errors.append(str(failure))
        if context.verbose:
            logger.warning("Warning: %s", failure)
