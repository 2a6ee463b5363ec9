"""
Runtime settings and access-token lookup.

Settings come from the environment, after loading a ``.env`` file if there
is one in the working directory.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .constants import (
    ACCESS_TOKEN_ENV_VAR,
    DEFAULT_PAGE_SIZE,
    DEFAULT_POLL_INTERVAL,
    STRAVA_ACTIVITY_URL,
    STRAVA_API_BASE,
    STRAVA_AUTHORIZE_URL,
    STRAVA_TOKEN_URL,
)
from .exceptions import ConfigurationError

__all__ = ["Settings", "load_settings", "resolve_access_token"]


@dataclass(frozen=True)
class Settings:
    """Configuration for talking to Strava."""

    api_base: str = STRAVA_API_BASE
    authorize_url: str = STRAVA_AUTHORIZE_URL
    token_url: str = STRAVA_TOKEN_URL
    activity_url_base: str = STRAVA_ACTIVITY_URL
    page_size: int = DEFAULT_PAGE_SIZE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    # None means wait for uploads indefinitely
    upload_timeout: Optional[float] = None
    request_timeout: Optional[float] = None


def _optional_seconds(env: Mapping[str, str], name: str) -> Optional[float]:
    value = env.get(name, "").strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}") from e
    if seconds <= 0:
        return None
    return seconds


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``env`` (default: ``.env`` plus os.environ)."""
    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ
    return Settings(
        api_base=env.get("STRAVA_API_BASE") or STRAVA_API_BASE,
        upload_timeout=_optional_seconds(env, "STRAVA_UPLOAD_TIMEOUT"),
        request_timeout=_optional_seconds(env, "STRAVA_REQUEST_TIMEOUT"),
    )


def resolve_access_token(token: Optional[str], env: Optional[Mapping[str, str]] = None) -> str:
    """Return the access token from the command line, or from the environment.

    Raises:
        ConfigurationError: If neither has one.
    """
    if token:
        return token
    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ
    token = env.get(ACCESS_TOKEN_ENV_VAR, "").strip()
    if not token:
        raise ConfigurationError(
            f"no access token: pass --access_token or set {ACCESS_TOKEN_ENV_VAR} "
            "(use the auth command to get one)"
        )
    return token
