"""
stravacli - bulk synchronization of Strava activities with CSV files.

This package provides tools for:
- Getting an access token through the OAuth browser flow
- Downloading activity history to CSV
- Creating, updating and uploading activities from CSV, with dry runs and
  resumable batches
"""

from .batch import BatchRunner
from .client import StravaClient
from .config import Settings, load_settings
from .reconcile import Outcome, RecordSet, reconcile
from .sync import (
    create_activities,
    download_activities,
    update_activities,
    upload_activities,
    upload_manual_activities,
)

__version__ = "0.1.0"
__author__ = "stravacli Contributors"

__all__ = [
    "BatchRunner",
    "StravaClient",
    "Settings",
    "load_settings",
    "Outcome",
    "RecordSet",
    "reconcile",
    "download_activities",
    "create_activities",
    "update_activities",
    "upload_activities",
    "upload_manual_activities",
]
