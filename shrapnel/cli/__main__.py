"""
shrapnel CLI entry point.

Usage:
    python -m shrapnel.cli explode <file>
    python -m shrapnel.cli flatten <file>
    python -m shrapnel.cli replace <file> <old> <new>
    python -m shrapnel.cli diff <left> <right>
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
