"""
CLI entry point for the backtester.

Allows running as: python -m quantback
"""

import sys

from quantback.engine.runner import main

if __name__ == "__main__":
    sys.exit(main())
