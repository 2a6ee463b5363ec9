"""
Per-operation checks run on a record before anything is sent to Strava.

All checks are pure: they look at the record (and, for updates, its previous
snapshot) and raise a ``ValidationError`` subclass naming what is wrong.
"""

from pathlib import Path
from typing import AbstractSet

from .constants import VALID_ACTIVITY_TYPES, VALID_FILE_TYPES
from .exceptions import (
    ImmutableFieldError,
    InvalidValueError,
    MissingFieldError,
    RestrictedFieldError,
    ValidationError,
)
from .models import Activity, ManualActivity, UploadActivity

__all__ = [
    "verify_for_create",
    "verify_for_update",
    "verify_manual",
    "verify_upload",
]


def _check_activity_type(activity_type: str, allowed: AbstractSet[str]) -> None:
    if not activity_type:
        raise MissingFieldError("Activity Type")
    if activity_type not in allowed:
        raise InvalidValueError(f"invalid Activity Type {activity_type!r}")


def verify_for_create(activity: Activity) -> None:
    """Check that ``activity`` looks like it can be created as a new activity."""
    if activity.start is None:
        raise MissingFieldError("Start")
    if not activity.name:
        raise MissingFieldError("Name")
    if activity.private:
        raise RestrictedFieldError("sorry, can't set Private")


def verify_for_update(record, prev) -> None:
    """Check that ``record`` can be sent as an update to ``prev``.

    The record's type lists the fields that can't change once an activity
    exists; the first one that differs is reported.

    Raises:
        ValidationError: If the record has no ID.
        ImmutableFieldError: If an immutable field was changed.
    """
    if not record.id:
        raise ValidationError("ID must be set for update")
    for field, label in type(record).IMMUTABLE_FIELDS.items():
        if getattr(record, field) != getattr(prev, field):
            raise ImmutableFieldError(label)


def verify_manual(
    activity: ManualActivity, activity_types: AbstractSet[str] = VALID_ACTIVITY_TYPES
) -> None:
    """Check that ``activity`` can be created as a manual activity."""
    if activity.start is None:
        raise MissingFieldError("Start")
    _check_activity_type(activity.activity_type, activity_types)
    if not activity.name:
        raise MissingFieldError("Name")


def verify_upload(
    activity: UploadActivity,
    activity_types: AbstractSet[str] = VALID_ACTIVITY_TYPES,
    file_types: AbstractSet[str] = VALID_FILE_TYPES,
) -> None:
    """Check that ``activity`` names a data file that can be uploaded."""
    _check_activity_type(activity.activity_type, activity_types)
    if not activity.name:
        raise MissingFieldError("Name")
    if not activity.file_type:
        raise MissingFieldError("File Type")
    if activity.file_type not in file_types:
        raise InvalidValueError(f"invalid File Type {activity.file_type!r}")
    if not activity.filename:
        raise MissingFieldError("Filename")
    if not Path(activity.filename).expanduser().is_file():
        raise ValidationError(f"Filename {activity.filename!r} not found")
