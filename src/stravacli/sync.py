"""
Bulk operations between CSV files and Strava.

Each operation loads its CSV file, checks every row, and drives the Strava
client through a ``BatchRunner`` so a failure can be resumed from the row
where it happened.
"""

import logging
import sys
from collections import Counter
from datetime import datetime
from typing import Optional

from .batch import BatchRunner
from .client import StravaClient
from .constants import FIRST_DATA_ROW
from .csvio import (
    ACTIVITY_SCHEMA,
    DOWNLOAD_SCHEMA,
    MANUAL_SCHEMA,
    UPLOAD_SCHEMA,
    Schema,
    detect_schema,
    header_line,
    load_records,
    write_records,
)
from .exceptions import BatchError, CSVFormatError, ValidationError
from .models import Activity, ManualActivity, UpdatableActivity, UploadActivity
from .reconcile import Outcome, Reconciliation, RecordSet, reconcile
from .validation import verify_for_create, verify_for_update, verify_manual, verify_upload

__all__ = [
    "download_activities",
    "create_activities",
    "update_activities",
    "upload_activities",
    "upload_manual_activities",
    "print_header",
]

logger = logging.getLogger(__name__)


def _report(counts: Counter, done: str, would: str, dry_run: bool) -> None:
    n = counts[done] + counts[would]
    if dry_run:
        print(f"Found {n} activities to be {done}.")
    else:
        print(f"✅ {done.capitalize()} {n} activities.")


def _save_progress(out_file: Optional[str], records, schema: Schema) -> None:
    """Write the records after a failed batch, keeping the batch error on top."""
    if not out_file:
        return
    try:
        write_records(out_file, records, schema)
    except CSVFormatError as e:
        print(f"⚠️  Couldn't save progress: {e}", file=sys.stderr)


def download_activities(
    client: StravaClient,
    out_file: Optional[str] = None,
    max_activities: int = 0,
    before: Optional[datetime] = None,
    after: Optional[datetime] = None,
) -> int:
    """Download the athlete's activities to a CSV file in the download layout.

    Args:
        client: Authenticated Strava client.
        out_file: Output path; stdout when empty.
        max_activities: Stop after this many activities (0 or less means no limit).
        before: Only activities that started before this time.
        after: Only activities that started after this time.

    Returns:
        Number of activities written.
    """
    per_page = client.settings.page_size
    limit = max_activities if max_activities > 0 else None
    before_ts = int(before.timestamp()) if before else None
    after_ts = int(after.timestamp()) if after else None

    records = []
    page = 1
    while True:
        activities = client.list_activities(page, per_page, before=before_ts, after=after_ts)
        for data in activities:
            records.append(UpdatableActivity.from_api(data))
            if limit and len(records) >= limit:
                break
        if (limit and len(records) >= limit) or len(activities) < per_page:
            break
        logger.debug("handled %d activities, fetching next page...", len(records))
        page += 1

    write_records(out_file, records, DOWNLOAD_SCHEMA)
    logger.debug("downloaded %d activities", len(records))
    if out_file:
        print(f"⬇️  Downloaded {len(records)} activities to {out_file}")
    return len(records)


def _create_one(client: Optional[StravaClient], activity: Activity, dry_run: bool) -> str:
    verify_for_create(activity)
    if dry_run:
        print(f"  Would create {activity}...")
        return "would create"
    print(f"  Creating {activity}...")
    created = client.create_activity(activity.to_create_payload())
    activity.assign_id(int(created["id"]))
    print(f"  --> {client.activity_url(activity.id)}")
    return "created"


def create_activities(
    client: Optional[StravaClient],
    in_file: str,
    out_file: Optional[str] = None,
    dry_run: bool = False,
    start_row: int = FIRST_DATA_ROW,
) -> Counter:
    """Create every activity in ``in_file`` that doesn't have an ID yet.

    The file (with newly assigned IDs) is written to ``out_file`` when one is
    given, also when the batch stops on an error, so the IDs of activities
    that did get created are kept.
    """
    runner = BatchRunner(start_row, dry_run)
    activities = load_records(in_file, ACTIVITY_SCHEMA)
    print(f"Found {len(activities)} activities in {in_file!r} to upload.")

    def handle(activity: Activity, dry: bool) -> str:
        if activity.id:
            print(f"  {activity} has already been uploaded, skipping")
            return "skipped"
        return _create_one(client, activity, dry)

    try:
        counts = runner.run(activities, handle, verb="create activity")
    except BatchError:
        _save_progress(out_file, activities, ACTIVITY_SCHEMA)
        raise
    if out_file:
        write_records(out_file, activities, ACTIVITY_SCHEMA)

    _report(counts, "created", "would create", dry_run)
    return counts


def _update_handler(client: Optional[StravaClient]):
    def handle(item: Reconciliation, dry_run: bool) -> str:
        record = item.record
        if item.outcome is Outcome.UNCHANGED:
            return "unchanged"
        if item.outcome is Outcome.CREATE:
            if not isinstance(record, Activity):
                raise ValidationError("ID must be set for update")
            return _create_one(client, record, dry_run)

        verify_for_update(record, item.previous)
        if dry_run:
            print(f"  Would update {record}...")
            return "would update"
        print(f"  Updating {record}...")
        updated = client.update_activity(record.id, record.to_update_payload())
        print(f"  --> {client.activity_url(updated.get('id', record.id))}")
        return "updated"

    return handle


def update_activities(
    client: Optional[StravaClient],
    orig_file: str,
    updated_file: str,
    out_file: Optional[str] = None,
    dry_run: bool = False,
    start_row: int = FIRST_DATA_ROW,
) -> Counter:
    """Send the rows of ``updated_file`` that differ from ``orig_file``.

    Both files must use the same layout: either the combined activity layout
    or the one written by ``download``. Rows are matched by ID; rows without
    an ID are created (combined layout only).

    Raises:
        CSVFormatError: If the files use different layouts.
        RecordCountMismatchError: If the files have a different number of rows.
        UnknownRecordError: If an updated row's ID isn't in the original file.
        BatchError: If a row fails validation or the Strava call.
    """
    runner = BatchRunner(start_row, dry_run)
    schema = detect_schema(orig_file)
    updated_schema = detect_schema(updated_file)
    if updated_schema is not schema:
        raise CSVFormatError(
            f"{orig_file!r} uses the {schema.name} layout but {updated_file!r} "
            f"uses the {updated_schema.name} layout"
        )

    previous = RecordSet(load_records(orig_file, schema), orig_file)
    updated = RecordSet(load_records(updated_file, schema), updated_file)
    plan = reconcile(previous, updated)

    print(f"Found {len(updated)} activities...")
    try:
        counts = runner.run(
            plan, _update_handler(client), verb="update activity", describe=lambda r: str(r.record)
        )
    except BatchError:
        _save_progress(out_file, updated.records, schema)
        raise
    if out_file:
        write_records(out_file, updated.records, schema)

    if counts["created"] or counts["would create"]:
        _report(counts, "created", "would create", dry_run)
    _report(counts, "updated", "would update", dry_run)
    return counts


def _upload_one(client: Optional[StravaClient], activity: UploadActivity, dry_run: bool) -> str:
    verify_upload(activity)
    if dry_run:
        print(f"  Would upload {activity}...")
        return "would upload"
    print(f"  Uploading {activity}...")
    upload = client.create_upload(activity.filename, activity.to_upload_fields())
    activity_id = client.wait_for_upload(upload)
    print(f"  --> {client.activity_url(activity_id)}")
    return "uploaded"


def upload_activities(
    client: Optional[StravaClient],
    in_file: str,
    dry_run: bool = False,
    start_row: int = FIRST_DATA_ROW,
) -> Counter:
    """Upload the data file named on each row of the manifest ``in_file``."""
    runner = BatchRunner(start_row, dry_run)
    activities = load_records(in_file, UPLOAD_SCHEMA)
    print(f"Found {len(activities)} activities in {in_file!r} to upload.")
    counts = runner.run(
        activities, lambda a, dry: _upload_one(client, a, dry), verb="upload activity"
    )
    _report(counts, "uploaded", "would upload", dry_run)
    return counts


def _create_manual_one(
    client: Optional[StravaClient], activity: ManualActivity, dry_run: bool
) -> str:
    verify_manual(activity)
    if dry_run:
        print(f"  Would create {activity}...")
        return "would create"
    print(f"  Creating {activity}...")
    created = client.create_activity(activity.to_create_payload())
    activity_id = int(created["id"])
    if activity.workout_type is not None:
        # The create endpoint has no workout type; set it afterwards
        client.update_activity(activity_id, {"workout_type": activity.workout_type})
    print(f"  --> {client.activity_url(activity_id)}")
    return "created"


def upload_manual_activities(
    client: Optional[StravaClient],
    in_file: str,
    dry_run: bool = False,
    start_row: int = FIRST_DATA_ROW,
) -> Counter:
    """Create a manual activity (no data file) for each row of ``in_file``."""
    runner = BatchRunner(start_row, dry_run)
    activities = load_records(in_file, MANUAL_SCHEMA)
    print(f"Found {len(activities)} activities in {in_file!r} to upload.")
    counts = runner.run(
        activities, lambda a, dry: _create_manual_one(client, a, dry), verb="create activity"
    )
    _report(counts, "created", "would create", dry_run)
    return counts


def print_header(schema: Schema) -> None:
    """Print the header line for a new file of the given layout."""
    print(header_line(schema), end="")
