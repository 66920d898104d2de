"""
fnr - Main Entry

Usage:
    python -m fnr PATTERN                       # Search mode
    python -m fnr PATTERN REPLACEMENT [GLOB...] # Rename mode
    python -m fnr -r 'test_(.+)' 'spec_$1' --dry-run
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
