"""
Thin wrapper around the Strava REST API.

Every call either returns the decoded JSON body or raises ``APIError``. When
the service answers with an error status, the status and the response body
end up in the message together so the user sees what Strava said.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .config import Settings
from .exceptions import APIError, UploadFailedError, UploadTimeoutError

__all__ = ["StravaClient"]

logger = logging.getLogger(__name__)


class StravaClient:
    """Bearer-token client for the activity and upload endpoints.

    Args:
        access_token: OAuth access token (see the ``auth`` command).
        settings: API location and polling behavior.
        session: Optional pre-built ``requests.Session``.
    """

    def __init__(
        self,
        access_token: str,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    def activity_url(self, activity_id: int) -> str:
        return f"{self.settings.activity_url_base}/{activity_id}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.settings.api_base}{path}"
        try:
            response = self.session.request(
                method, url, timeout=self.settings.request_timeout, **kwargs
            )
        except requests.RequestException as e:
            raise APIError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            raise APIError(
                f"{method} {path} failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"{method} {path} returned a non-JSON response: {response.text}") from e

    def list_activities(
        self,
        page: int,
        per_page: int,
        before: Optional[int] = None,
        after: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """One page of the authenticated athlete's activities, newest first.

        Args:
            page: 1-based page number.
            per_page: Page size.
            before: Only activities before this epoch timestamp.
            after: Only activities after this epoch timestamp.
        """
        params = {"page": page, "per_page": per_page}
        if before is not None:
            params["before"] = before
        if after is not None:
            params["after"] = after
        return self._request("GET", "/athlete/activities", params=params)

    def create_activity(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/activities", data=payload)

    def update_activity(self, activity_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/activities/{activity_id}", json=payload)

    def create_upload(self, filename: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Start an upload of a data file; processing continues on Strava's side."""
        path = Path(filename).expanduser()
        with open(path, "rb") as f:
            return self._request("POST", "/uploads", data=fields, files={"file": (path.name, f)})

    def get_upload(self, upload_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/uploads/{upload_id}")

    def wait_for_upload(self, upload: Dict[str, Any]) -> int:
        """Poll an upload until Strava has finished processing it.

        A non-empty ``error`` means processing failed; a non-empty
        ``activity_id`` means it is done. Anything else is checked again after
        ``settings.poll_interval`` seconds. Polling only gives up when
        ``settings.upload_timeout`` is set and has passed.

        Returns:
            ID of the created activity.

        Raises:
            UploadFailedError: If Strava reports a processing error.
            UploadTimeoutError: If the upload timeout passes first.
            APIError: If a status request fails.
        """
        timeout = self.settings.upload_timeout
        deadline = time.monotonic() + timeout if timeout else None
        while True:
            if upload.get("error"):
                raise UploadFailedError(f"upload failed: {upload['error']}")
            if upload.get("activity_id"):
                return int(upload["activity_id"])
            if deadline is not None and time.monotonic() >= deadline:
                raise UploadTimeoutError(
                    f"upload {upload.get('id')} still processing after {timeout:g}s "
                    f"(last status: {upload.get('status')!r})"
                )
            time.sleep(self.settings.poll_interval)
            logger.debug("checking on status of upload %s...", upload.get("id"))
            upload = self.get_upload(upload["id"])
