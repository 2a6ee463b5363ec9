#!/usr/bin/env .venv/bin/python3
"""
Strava bulk activity tool
Downloads, creates, updates and uploads Strava activities using CSV files.
"""

import sys
from pathlib import Path

# Add src directory to path so we can import stravacli
sys.path.insert(0, str(Path(__file__).parent / "src"))

from stravacli.cli import main

if __name__ == "__main__":
    sys.exit(main())
