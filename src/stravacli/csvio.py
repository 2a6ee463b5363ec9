"""
Reading and writing activity CSV files.

Each file layout is described by a ``Schema``: the record type it holds and
an ordered list of columns mapping a header label to a record field and a
value kind. pandas does the CSV work; this module converts cells to and from
record values.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

import pandas as pd

from .constants import FIRST_DATA_ROW
from .exceptions import CSVFormatError
from .models import (
    Activity,
    ManualActivity,
    UpdatableActivity,
    UploadActivity,
    format_start,
    parse_timestamp,
)

__all__ = [
    "Column",
    "Schema",
    "ACTIVITY_SCHEMA",
    "DOWNLOAD_SCHEMA",
    "UPLOAD_SCHEMA",
    "MANUAL_SCHEMA",
    "load_records",
    "write_records",
    "header_line",
    "detect_schema",
]

logger = logging.getLogger(__name__)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("", "false", "0"):
        return False
    if lowered in ("true", "1"):
        return True
    raise ValueError(f'expected "true" or "false", got {value!r}')


def _parse_int(value: str) -> int:
    value = value.strip()
    return int(value) if value else 0


def _parse_optional_int(value: str) -> Optional[int]:
    value = value.strip()
    return int(value) if value else None


def _parse_float(value: str) -> float:
    value = value.strip()
    return float(value) if value else 0.0


def _format_float(value: float) -> str:
    if not value:
        return "0"
    return f"{value:f}".rstrip("0").rstrip(".")


# kind -> (parse cell, format value)
_CONVERTERS: Dict[str, Tuple[Callable[[str], Any], Callable[[Any], str]]] = {
    "str": (lambda v: v, lambda v: v or ""),
    "id": (_parse_int, lambda v: str(v) if v else ""),
    "int": (_parse_int, str),
    "optional_int": (_parse_optional_int, lambda v: "" if v is None else str(v)),
    "float": (_parse_float, _format_float),
    "bool": (_parse_bool, lambda v: "true" if v else "false"),
    "timestamp": (parse_timestamp, format_start),
}


@dataclass(frozen=True)
class Column:
    """One CSV column: header label, record field and value kind."""

    label: str
    field: str
    kind: str = "str"


@dataclass(frozen=True)
class Schema:
    """Layout of one kind of CSV file."""

    name: str
    record_type: Type
    columns: Tuple[Column, ...]

    @property
    def labels(self) -> List[str]:
        return [c.label for c in self.columns]


ACTIVITY_SCHEMA = Schema(
    "activity",
    Activity,
    (
        Column("ID", "id", "id"),
        Column("Start", "start", "timestamp"),
        Column("Type", "type"),
        Column("Name", "name"),
        Column("Description", "description"),
        Column("Duration (seconds)", "duration", "int"),
        Column("Distance", "distance", "float"),
        Column("Private?", "private", "bool"),
        Column("Commute?", "commute", "bool"),
        Column("Trainer?", "trainer", "bool"),
    ),
)

DOWNLOAD_SCHEMA = Schema(
    "download",
    UpdatableActivity,
    (
        Column("ID", "id", "id"),
        Column("Start", "start", "timestamp"),
        Column("Activity Type", "activity_type"),
        Column("Name", "name"),
        Column("Workout Type", "workout_type", "optional_int"),
        Column("Gear ID", "gear_id"),
        Column("Commute?", "commute", "bool"),
        Column("Trainer?", "trainer", "bool"),
    ),
)

UPLOAD_SCHEMA = Schema(
    "upload",
    UploadActivity,
    (
        Column("External ID", "external_id"),
        Column("Activity Type", "activity_type"),
        Column("Name", "name"),
        Column("Description", "description"),
        Column("Commute?", "commute", "bool"),
        Column("Trainer?", "trainer", "bool"),
        Column("File Type", "file_type"),
        Column("Filename", "filename"),
    ),
)

MANUAL_SCHEMA = Schema(
    "manual",
    ManualActivity,
    (
        Column("Start", "start", "timestamp"),
        Column("Activity Type", "activity_type"),
        Column("Name", "name"),
        Column("Description", "description"),
        Column("Workout Type", "workout_type", "optional_int"),
        Column("Duration", "duration", "int"),
        Column("Distance", "distance", "float"),
        Column("Commute?", "commute", "bool"),
        Column("Trainer?", "trainer", "bool"),
    ),
)

# Schemas that ``update`` knows how to reconcile, in detection order
UPDATABLE_SCHEMAS = (ACTIVITY_SCHEMA, DOWNLOAD_SCHEMA)


def _read_frame(filename: str) -> pd.DataFrame:
    """Read every cell as a string; rows must have as many fields as the header."""
    try:
        # The header row fixes the width, so longer rows fail to parse
        raw = pd.read_csv(filename, header=None, dtype=str, keep_default_na=False)
    except FileNotFoundError as e:
        raise CSVFormatError(f"failed to open {filename!r}: {e}") from e
    except pd.errors.EmptyDataError as e:
        raise CSVFormatError(f"failed to parse {filename!r}: file is empty") from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise CSVFormatError(f"failed to parse {filename!r}: {e}") from e

    frame = raw.iloc[1:].reset_index(drop=True)
    frame.columns = [str(label) for label in raw.iloc[0]]

    # Cells missing from short rows are the only NaNs left with keep_default_na=False
    short = frame.index[frame.isna().any(axis=1)]
    if len(short):
        row = FIRST_DATA_ROW + int(short[0])
        raise CSVFormatError(
            f"failed to parse {filename!r} row {row}: wrong number of fields "
            f"(expected {len(frame.columns)})"
        )
    return frame


def _row_to_record(row: Dict[str, str], schema: Schema, filename: str, row_number: int):
    values = {}
    for column in schema.columns:
        parse, _ = _CONVERTERS[column.kind]
        cell = row[column.label]
        try:
            values[column.field] = parse(cell)
        except ValueError as e:
            raise CSVFormatError(
                f"failed to parse {filename!r} row {row_number}, column {column.label!r}: {e}"
            ) from e
    return schema.record_type(**values)


def load_records(filename: str, schema: Schema) -> list:
    """Load every data row of a CSV file as records of the schema's type.

    Args:
        filename: Path to the CSV file.
        schema: Expected layout. Extra columns are ignored.

    Returns:
        List of records in file order.

    Raises:
        CSVFormatError: If the file can't be read, a column is missing, or a
            cell doesn't hold the expected kind of value.
    """
    frame = _read_frame(filename)

    missing = [label for label in schema.labels if label not in frame.columns]
    if missing:
        raise CSVFormatError(
            f"{filename!r} is missing column(s) {', '.join(repr(m) for m in missing)}"
        )
    extra = [c for c in frame.columns if c not in schema.labels]
    if extra:
        logger.debug("ignoring extra columns in %s: %s", filename, extra)

    records = []
    for offset, row in enumerate(frame.to_dict(orient="records")):
        records.append(_row_to_record(row, schema, filename, FIRST_DATA_ROW + offset))
    return records


def detect_schema(filename: str, candidates: Sequence[Schema] = UPDATABLE_SCHEMAS) -> Schema:
    """Pick the schema whose columns all appear in the file's header."""
    header = list(_read_frame(filename).columns)
    for schema in candidates:
        if all(label in header for label in schema.labels):
            return schema
    names = ", ".join(s.name for s in candidates)
    raise CSVFormatError(f"{filename!r} doesn't match any known layout ({names})")


def _to_frame(records: Sequence, schema: Schema) -> pd.DataFrame:
    rows = []
    for record in records:
        rows.append(
            [_CONVERTERS[c.kind][1](getattr(record, c.field)) for c in schema.columns]
        )
    return pd.DataFrame(rows, columns=schema.labels)


def write_records(filename: Optional[str], records: Sequence, schema: Schema) -> None:
    """Write records to ``filename``, or to stdout when it is empty."""
    frame = _to_frame(records, schema)
    if not filename:
        frame.to_csv(sys.stdout, index=False)
        return
    path = Path(filename)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(path, index=False)
    except OSError as e:
        raise CSVFormatError(f"failed to open output file {filename!r}: {e}") from e


def header_line(schema: Schema) -> str:
    """The header row a new file of this layout starts with."""
    return _to_frame([], schema).to_csv(index=False)
