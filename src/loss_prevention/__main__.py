"""
Entry point for running the loss prevention recorder as a module.

Usage:
    python -m loss_prevention [-c CONFIG] < events.ndjson
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
