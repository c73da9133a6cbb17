#!/usr/bin/env python3
"""Main entry point: run GreyFlow workflows from the terminal."""
import sys

from greyflow.cli import main

if __name__ == "__main__":
    sys.exit(main())
