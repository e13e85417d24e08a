#!/usr/bin/env python3
"""Convenience runner for the monotrack command line.

Usage:
    python run.py stats
"""
import logging
import sys

from monotrack.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
