#!/usr/bin/env python3
"""Run the termroute command line.

Usage:
    python run.py [--config config.yaml] [--debug] [--trace] [--verbose] children PID
    python run.py [--config config.yaml] find PID [PID ...] [--app NAME]
"""
import asyncio
import sys

from termroute.main import main

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
