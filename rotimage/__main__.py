"""
Main entry point for the rotimage package.

Allows running: python -m rotimage -i <input> -o <output>
"""

import sys
from rotimage.cli import main

if __name__ == "__main__":
    sys.exit(main())
