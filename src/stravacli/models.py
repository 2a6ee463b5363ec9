"""
Activity record types exchanged between CSV files and Strava.

Each type declares the fields that take part in change detection
(``COMPARED_FIELDS``) and, where it can be updated, the fields Strava won't
let us change once an activity exists (``IMMUTABLE_FIELDS``).
"""

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Tuple

from dateutil import parser as dateparser

from .constants import DAY_FORMAT, LOCAL_TIMESTAMP_FORMAT, TIMESTAMP_FORMAT

__all__ = [
    "Activity",
    "UpdatableActivity",
    "UploadActivity",
    "ManualActivity",
    "format_start",
    "format_local_start",
    "parse_timestamp",
]


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp and ensure it's timezone-aware.

    Blank values give None; naive timestamps are taken as UTC.

    Raises:
        ValueError: If the value isn't a timestamp.
    """
    value = value.strip()
    if not value:
        return None
    parsed = dateparser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_start(start: Optional[datetime]) -> str:
    """Format a start time for a CSV file (UTC, RFC 3339)."""
    if start is None:
        return ""
    return start.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def format_local_start(start: Optional[datetime]) -> str:
    """Format a start time as the wall-clock time it was written with.

    Strava reads ``start_date_local`` as the athlete's local time, so the
    offset is dropped rather than converted.
    """
    if start is None:
        return ""
    return start.strftime(LOCAL_TIMESTAMP_FORMAT)


def _day(start: Optional[datetime]) -> str:
    return start.strftime(DAY_FORMAT) if start else "?"


class _Record:
    """Field-by-field equality shared by the record types."""

    COMPARED_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def same_as(self, other: "_Record") -> bool:
        """Return True if every compared field matches ``other``."""
        if type(self) is not type(other):
            return False
        return all(getattr(self, name) == getattr(other, name) for name in self.COMPARED_FIELDS)

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


@dataclass(eq=False)
class Activity(_Record):
    """A single row of the combined create/update file."""

    id: int = 0
    start: Optional[datetime] = None
    type: str = ""
    name: str = ""
    description: str = ""
    duration: int = 0
    distance: float = 0.0
    private: bool = False
    commute: bool = False
    trainer: bool = False

    COMPARED_FIELDS = (
        "id",
        "start",
        "type",
        "name",
        "description",
        "duration",
        "distance",
        "private",
        "commute",
        "trainer",
    )
    IMMUTABLE_FIELDS = {
        "start": "Start",
        "duration": "Duration",
        "distance": "Distance",
        "private": "Private",
    }

    def __str__(self):
        s = f"{self.name} on {_day(self.start)}"
        if self.id:
            s += f" (ID={self.id})"
        return f"[{s}]"

    def assign_id(self, activity_id: int) -> None:
        """Record the ID Strava assigned; an existing ID is never replaced."""
        if self.id and self.id != activity_id:
            raise ValueError(f"activity already has ID {self.id}, refusing to set {activity_id}")
        self.id = activity_id

    def to_create_payload(self) -> Dict[str, Any]:
        """Form fields for POST /activities; optional fields only when set."""
        payload = {
            "name": self.name,
            "type": self.type,
            "start_date_local": format_local_start(self.start),
            "elapsed_time": self.duration,
        }
        if self.description:
            payload["description"] = self.description
        if self.distance:
            payload["distance"] = self.distance
        if self.trainer:
            payload["trainer"] = 1
        if self.commute:
            payload["commute"] = 1
        return payload

    def to_update_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "commute": self.commute,
            "trainer": self.trainer,
        }


@dataclass(eq=False)
class UpdatableActivity(_Record):
    """A single row of a file written by ``download``."""

    id: int = 0
    start: Optional[datetime] = None
    activity_type: str = ""
    name: str = ""
    workout_type: Optional[int] = None
    gear_id: str = ""
    commute: bool = False
    trainer: bool = False

    COMPARED_FIELDS = (
        "id",
        "start",
        "activity_type",
        "name",
        "workout_type",
        "gear_id",
        "commute",
        "trainer",
    )
    IMMUTABLE_FIELDS = {"start": "Start"}

    def __str__(self):
        s = f"{self.name} on {_day(self.start)}"
        if self.id:
            s += f" (ID={self.id})"
        return f"[{s}]"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "UpdatableActivity":
        """Build a record from a Strava SummaryActivity JSON object."""
        return cls(
            id=int(data["id"]),
            start=parse_timestamp(data.get("start_date") or ""),
            activity_type=data.get("type") or "",
            name=data.get("name") or "",
            workout_type=data.get("workout_type"),
            gear_id=data.get("gear_id") or "",
            commute=bool(data.get("commute")),
            trainer=bool(data.get("trainer")),
        )

    def to_update_payload(self) -> Dict[str, Any]:
        payload = {
            "name": self.name,
            "type": self.activity_type,
            "commute": self.commute,
            "trainer": self.trainer,
            # Strava clears the gear when it is sent "none"
            "gear_id": self.gear_id or "none",
        }
        if self.workout_type is not None:
            payload["workout_type"] = self.workout_type
        return payload


@dataclass(eq=False)
class UploadActivity(_Record):
    """A single row of the file-upload manifest."""

    external_id: str = ""
    activity_type: str = ""
    name: str = ""
    description: str = ""
    commute: bool = False
    trainer: bool = False
    file_type: str = ""
    filename: str = ""

    COMPARED_FIELDS = (
        "external_id",
        "activity_type",
        "name",
        "description",
        "commute",
        "trainer",
        "file_type",
        "filename",
    )

    def __str__(self):
        return f"[{self.name} from {self.filename}]"

    def to_upload_fields(self) -> Dict[str, Any]:
        """Multipart form fields that go alongside the data file."""
        data = {
            "name": self.name,
            "activity_type": self.activity_type,
            "data_type": self.file_type,
        }
        if self.external_id:
            data["external_id"] = self.external_id
        if self.description:
            data["description"] = self.description
        if self.trainer:
            data["trainer"] = 1
        if self.commute:
            data["commute"] = 1
        return data


@dataclass(eq=False)
class ManualActivity(_Record):
    """A single row of the manual-activity manifest."""

    start: Optional[datetime] = None
    activity_type: str = ""
    name: str = ""
    description: str = ""
    workout_type: Optional[int] = None
    duration: int = 0
    distance: float = 0.0
    commute: bool = False
    trainer: bool = False

    COMPARED_FIELDS = (
        "start",
        "activity_type",
        "name",
        "description",
        "workout_type",
        "duration",
        "distance",
        "commute",
        "trainer",
    )

    def __str__(self):
        return f"[{self.name} on {_day(self.start)}]"

    def to_create_payload(self) -> Dict[str, Any]:
        payload = {
            "name": self.name,
            "type": self.activity_type,
            "start_date_local": format_local_start(self.start),
            "elapsed_time": self.duration,
        }
        if self.description:
            payload["description"] = self.description
        if self.distance:
            payload["distance"] = self.distance
        if self.trainer:
            payload["trainer"] = 1
        if self.commute:
            payload["commute"] = 1
        return payload
