"""Shared fixtures for stravacli tests."""

from datetime import datetime, timezone

import pytest

from stravacli.models import Activity

T = datetime(2019, 2, 22, 18, 53, 46, tzinfo=timezone.utc)


@pytest.fixture
def start_time():
    return T


@pytest.fixture
def make_activity():
    """Factory for combined-layout records with sensible defaults."""

    def _make(**kwargs):
        values = {"id": 100, "start": T, "type": "Run", "name": "Run", "duration": 1800, "distance": 5000.0}
        values.update(kwargs)
        return Activity(**values)

    return _make


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a file in tmp_path and return its path as a string."""

    def _write(name, text):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write
