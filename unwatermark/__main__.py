"""Main entry point for unwatermark package.

This module allows the package to be executed as:
    python -m unwatermark [args...]
"""

from .cli import main

if __name__ == "__main__":
    main()
