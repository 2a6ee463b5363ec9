"""Tests for the Strava REST client."""

import unittest
from unittest.mock import MagicMock, Mock, call, patch

import pytest
import requests

from stravacli.client import StravaClient
from stravacli.config import Settings
from stravacli.exceptions import APIError, UploadFailedError, UploadTimeoutError


def _response(status=200, json_body=None, text=""):
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.text = text
    response.json.return_value = json_body
    return response


class TestRequests(unittest.TestCase):
    """Test request handling and error reporting"""

    def setUp(self):
        self.session = MagicMock()
        self.client = StravaClient("tok", Settings(), session=self.session)

    def test_sets_bearer_token(self):
        self.session.headers.update.assert_called_once_with({"Authorization": "Bearer tok"})

    def test_list_activities(self):
        self.session.request.return_value = _response(json_body=[{"id": 1}])

        result = self.client.list_activities(2, 25, before=200, after=100)

        self.assertEqual(result, [{"id": 1}])
        self.session.request.assert_called_once_with(
            "GET",
            "https://www.strava.com/api/v3/athlete/activities",
            timeout=None,
            params={"page": 2, "per_page": 25, "before": 200, "after": 100},
        )

    def test_list_activities_without_bounds(self):
        self.session.request.return_value = _response(json_body=[])
        self.client.list_activities(1, 25)
        _, kwargs = self.session.request.call_args
        self.assertEqual(kwargs["params"], {"page": 1, "per_page": 25})

    def test_create_activity(self):
        self.session.request.return_value = _response(201, {"id": 55})
        self.assertEqual(self.client.create_activity({"name": "x"}), {"id": 55})
        self.session.request.assert_called_once_with(
            "POST", "https://www.strava.com/api/v3/activities", timeout=None, data={"name": "x"}
        )

    def test_update_activity(self):
        self.session.request.return_value = _response(200, {"id": 55})
        self.client.update_activity(55, {"name": "y"})
        self.session.request.assert_called_once_with(
            "PUT", "https://www.strava.com/api/v3/activities/55", timeout=None, json={"name": "y"}
        )

    def test_error_status_includes_body(self):
        self.session.request.return_value = _response(
            401, text='{"message":"Authorization Error"}'
        )
        with self.assertRaises(APIError) as ctx:
            self.client.create_activity({})
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIn("401", str(ctx.exception))
        self.assertIn("Authorization Error", str(ctx.exception))

    def test_transport_error(self):
        self.session.request.side_effect = requests.ConnectionError("no route to host")
        with self.assertRaises(APIError) as ctx:
            self.client.get_upload(1)
        self.assertIn("no route to host", str(ctx.exception))
        self.assertIsNone(ctx.exception.status_code)

    def test_non_json_body(self):
        response = _response(200, text="<html>")
        response.json.side_effect = ValueError("not json")
        self.session.request.return_value = response
        with self.assertRaises(APIError):
            self.client.get_upload(1)

    def test_activity_url(self):
        self.assertEqual(self.client.activity_url(9), "https://www.strava.com/activities/9")


def test_create_upload_sends_file(tmp_path):
    data_file = tmp_path / "ride.fit"
    data_file.write_bytes(b"FITDATA")
    session = MagicMock()
    session.request.return_value = _response(201, {"id": 7, "status": "Your activity is still being processed."})
    client = StravaClient("tok", session=session)

    upload = client.create_upload(str(data_file), {"data_type": "fit"})

    assert upload["id"] == 7
    args, kwargs = session.request.call_args
    assert args == ("POST", "https://www.strava.com/api/v3/uploads")
    assert kwargs["data"] == {"data_type": "fit"}
    name, handle = kwargs["files"]["file"]
    assert name == "ride.fit"
    assert handle.closed


class TestWaitForUpload:
    """Tests for upload status polling."""

    @patch("stravacli.client.time.sleep")
    def test_done_immediately(self, mock_sleep):
        client = StravaClient("tok", session=MagicMock())
        client.get_upload = Mock()

        assert client.wait_for_upload({"id": 1, "activity_id": 99, "error": None}) == 99
        mock_sleep.assert_not_called()
        client.get_upload.assert_not_called()

    @patch("stravacli.client.time.sleep")
    def test_error_stops_polling(self, mock_sleep):
        client = StravaClient("tok", session=MagicMock())
        client.get_upload = Mock()

        with pytest.raises(UploadFailedError, match="upload failed: duplicate of activity 5"):
            client.wait_for_upload({"id": 1, "activity_id": None, "error": "duplicate of activity 5"})
        client.get_upload.assert_not_called()

    @patch("stravacli.client.time.sleep")
    def test_pending_polls_once_more(self, mock_sleep):
        client = StravaClient("tok", session=MagicMock())
        client.get_upload = Mock(return_value={"id": 1, "activity_id": 42, "error": None})

        result = client.wait_for_upload({"id": 1, "activity_id": None, "error": None})

        assert result == 42
        mock_sleep.assert_called_once_with(1.0)
        client.get_upload.assert_called_once_with(1)

    @patch("stravacli.client.time.sleep")
    def test_polls_until_done(self, mock_sleep):
        pending = {"id": 3, "activity_id": None, "error": "", "status": "processing"}
        client = StravaClient("tok", session=MagicMock())
        client.get_upload = Mock(side_effect=[pending, pending, {"id": 3, "activity_id": 8}])

        assert client.wait_for_upload(pending) == 8
        assert mock_sleep.call_args_list == [call(1.0)] * 3
        assert client.get_upload.call_count == 3

    @patch("stravacli.client.time.sleep")
    def test_error_after_pending(self, mock_sleep):
        client = StravaClient("tok", session=MagicMock())
        client.get_upload = Mock(return_value={"id": 1, "activity_id": None, "error": "corrupt file"})

        with pytest.raises(UploadFailedError, match="corrupt file"):
            client.wait_for_upload({"id": 1})
        assert client.get_upload.call_count == 1

    @patch("stravacli.client.time.sleep")
    @patch("stravacli.client.time.monotonic")
    def test_optional_timeout(self, mock_monotonic, mock_sleep):
        mock_monotonic.side_effect = [0.0, 1.0, 11.0]
        pending = {"id": 1, "activity_id": None, "error": None, "status": "processing"}
        client = StravaClient("tok", Settings(upload_timeout=10), session=MagicMock())
        client.get_upload = Mock(return_value=pending)

        with pytest.raises(UploadTimeoutError, match="still processing after 10s"):
            client.wait_for_upload(pending)
        assert client.get_upload.call_count == 1
