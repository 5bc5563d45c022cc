#!/usr/bin/env python3
"""Startup script for the unwatermark HTTP API.

This script launches the Flask service with settings taken from the
``UNWATERMARK_*`` environment variables.
"""

import sys

from unwatermark.cli import main


if __name__ == "__main__":
    main(["serve", *sys.argv[1:]])
