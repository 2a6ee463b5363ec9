"""Tests for CSV reading and writing."""

import unittest
from datetime import datetime, timezone

import pytest

from stravacli.csvio import (
    ACTIVITY_SCHEMA,
    DOWNLOAD_SCHEMA,
    MANUAL_SCHEMA,
    UPLOAD_SCHEMA,
    detect_schema,
    header_line,
    load_records,
    write_records,
)
from stravacli.exceptions import CSVFormatError
from stravacli.models import Activity, UpdatableActivity

ACTIVITY_HEADER = (
    "ID,Start,Type,Name,Description,Duration (seconds),Distance,Private?,Commute?,Trainer?\n"
)
DOWNLOAD_HEADER = "ID,Start,Activity Type,Name,Workout Type,Gear ID,Commute?,Trainer?\n"


class TestHeaders(unittest.TestCase):
    """Test header lines for each layout"""

    def test_activity_header(self):
        self.assertEqual(header_line(ACTIVITY_SCHEMA), ACTIVITY_HEADER)

    def test_download_header(self):
        self.assertEqual(header_line(DOWNLOAD_SCHEMA), DOWNLOAD_HEADER)

    def test_upload_header(self):
        self.assertEqual(
            header_line(UPLOAD_SCHEMA),
            "External ID,Activity Type,Name,Description,Commute?,Trainer?,File Type,Filename\n",
        )

    def test_manual_header(self):
        self.assertEqual(
            header_line(MANUAL_SCHEMA),
            "Start,Activity Type,Name,Description,Workout Type,Duration,Distance,Commute?,Trainer?\n",
        )


class TestLoadRecords:
    """Tests for load_records."""

    def test_load_activity_rows(self, write_csv):
        path = write_csv(
            "a.csv",
            ACTIVITY_HEADER
            + '100,2019-02-22T18:53:46Z,Run,"Run, fast",,1800,5000,false,TRUE,\n'
            + ",2019-02-23T07:00:00Z,Ride,Ride,hills,3600,20000.5,false,false,true\n",
        )
        records = load_records(path, ACTIVITY_SCHEMA)

        assert len(records) == 2
        first, second = records
        assert isinstance(first, Activity)
        assert first.id == 100
        assert first.start == datetime(2019, 2, 22, 18, 53, 46, tzinfo=timezone.utc)
        assert first.name == "Run, fast"
        assert first.description == ""
        assert first.duration == 1800
        assert first.distance == 5000.0
        assert first.commute is True
        assert first.trainer is False
        assert second.id == 0
        assert second.distance == 20000.5
        assert second.trainer is True

    def test_load_download_rows(self, write_csv):
        path = write_csv(
            "d.csv",
            DOWNLOAD_HEADER + "7,2019-02-22T18:53:46Z,Run,Run,,b1,false,false\n",
        )
        (record,) = load_records(path, DOWNLOAD_SCHEMA)
        assert isinstance(record, UpdatableActivity)
        assert record.workout_type is None
        assert record.gear_id == "b1"

    def test_header_only(self, write_csv):
        path = write_csv("a.csv", ACTIVITY_HEADER)
        assert load_records(path, ACTIVITY_SCHEMA) == []

    def test_extra_columns_ignored(self, write_csv):
        path = write_csv("d.csv", DOWNLOAD_HEADER.rstrip("\n") + ",Notes\n1,,Run,Run,,,false,false,hi\n")
        (record,) = load_records(path, DOWNLOAD_SCHEMA)
        assert record.id == 1
        assert record.start is None

    def test_missing_column(self, write_csv):
        path = write_csv("d.csv", "ID,Start,Name\n1,,x\n")
        with pytest.raises(CSVFormatError, match="Activity Type"):
            load_records(path, DOWNLOAD_SCHEMA)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CSVFormatError, match="failed to open"):
            load_records(str(tmp_path / "nope.csv"), ACTIVITY_SCHEMA)

    def test_empty_file(self, write_csv):
        path = write_csv("a.csv", "")
        with pytest.raises(CSVFormatError, match="empty"):
            load_records(path, ACTIVITY_SCHEMA)

    def test_bad_value_reports_row_and_column(self, write_csv):
        path = write_csv(
            "a.csv",
            ACTIVITY_HEADER
            + "1,2019-02-22T18:53:46Z,Run,Run,,1800,5000,false,false,false\n"
            + "2,2019-02-22T18:53:46Z,Run,Run,,1800,5000,false,maybe,false\n",
        )
        with pytest.raises(CSVFormatError, match=r"row 3, column 'Commute\?'"):
            load_records(path, ACTIVITY_SCHEMA)

    def test_bad_timestamp(self, write_csv):
        path = write_csv("a.csv", ACTIVITY_HEADER + "1,soon,Run,Run,,1,1,false,false,false\n")
        with pytest.raises(CSVFormatError, match="Start"):
            load_records(path, ACTIVITY_SCHEMA)

    def test_short_row_rejected(self, write_csv):
        path = write_csv(
            "a.csv",
            ACTIVITY_HEADER
            + "1,2019-02-22T18:53:46Z,Run,Run,,1800,5000,false,false,false\n"
            + ",2019-02-22T18:53:46Z,Run,Run,,1800,5000\n",
        )
        with pytest.raises(CSVFormatError, match="row 3: wrong number of fields"):
            load_records(path, ACTIVITY_SCHEMA)

    def test_long_row_rejected(self, write_csv):
        path = write_csv(
            "a.csv",
            ACTIVITY_HEADER + "1,2019-02-22T18:53:46Z,Run,Run,,1800,5000,false,false,false,extra\n",
        )
        with pytest.raises(CSVFormatError, match="failed to parse"):
            load_records(path, ACTIVITY_SCHEMA)


class TestWriteRecords:
    """Tests for write_records."""

    def test_write_then_load(self, tmp_path, make_activity):
        path = str(tmp_path / "out" / "a.csv")
        records = [make_activity(), make_activity(id=0, name="New", distance=1234.5, commute=True)]
        write_records(path, records, ACTIVITY_SCHEMA)

        text = (tmp_path / "out" / "a.csv").read_text()
        lines = text.splitlines()
        assert lines[0] == ACTIVITY_HEADER.rstrip("\n")
        assert lines[1] == "100,2019-02-22T18:53:46Z,Run,Run,,1800,5000,false,false,false"
        assert lines[2] == ",2019-02-22T18:53:46Z,Run,New,,1800,1234.5,false,true,false"

        loaded = load_records(path, ACTIVITY_SCHEMA)
        assert all(a.same_as(b) for a, b in zip(records, loaded))

    def test_write_to_stdout(self, capsys, make_activity):
        write_records(None, [make_activity()], ACTIVITY_SCHEMA)
        out = capsys.readouterr().out
        assert out.startswith("ID,Start,Type")
        assert "100,2019-02-22T18:53:46Z" in out

    def test_unwritable_directory(self, tmp_path, make_activity):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(CSVFormatError, match="failed to open output file"):
            write_records(str(blocker / "a.csv"), [make_activity()], ACTIVITY_SCHEMA)


class TestDetectSchema:
    """Tests for detect_schema."""

    def test_detect_activity(self, write_csv):
        assert detect_schema(write_csv("a.csv", ACTIVITY_HEADER)) is ACTIVITY_SCHEMA

    def test_detect_download(self, write_csv):
        assert detect_schema(write_csv("d.csv", DOWNLOAD_HEADER)) is DOWNLOAD_SCHEMA

    def test_unknown_layout(self, write_csv):
        with pytest.raises(CSVFormatError, match="doesn't match"):
            detect_schema(write_csv("x.csv", "foo,bar\n1,2\n"))
