"""
Main entry point for running the package as a module.

Usage:
    python -m nitfgen generate image.ntf --output-dir derived/
    python -m nitfgen info image.ntf
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
