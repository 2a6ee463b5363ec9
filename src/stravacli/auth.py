"""
OAuth authorization-code flow for getting a Strava access token.

``requests_oauthlib`` builds the authorize URL and trades the code for a
token; a one-shot local web server receives the browser redirect carrying
the code in between.
See https://developers.strava.com/docs/authentication/
"""

import logging
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Dict, Optional
from urllib.parse import parse_qs, urlparse

import requests
from oauthlib.oauth2 import OAuth2Error
from requests_oauthlib import OAuth2Session

from .config import Settings
from .constants import DEFAULT_AUTH_PORT, READ_SCOPE, WRITE_SCOPE
from .exceptions import AuthenticationError

__all__ = ["oauth_session", "code_from_redirect", "wait_for_code", "exchange_code", "authenticate"]

logger = logging.getLogger(__name__)


def oauth_session(client_id: str, port: int, read_only: bool = False) -> OAuth2Session:
    """OAuth session that redirects back to the local server on ``port``."""
    # Strava wants one comma-separated scope string
    scope = [READ_SCOPE if read_only else WRITE_SCOPE]
    return OAuth2Session(client_id, redirect_uri=f"http://127.0.0.1:{port}", scope=scope)


def code_from_redirect(path: str, state: Optional[str] = None) -> str:
    """Pull the authorization code out of the redirect's request path.

    Raises:
        AuthenticationError: If the user denied access, the state doesn't
            match the one sent, or no code was sent.
    """
    query = parse_qs(urlparse(path).query)
    error = query.get("error", [""])[0]
    if error:
        raise AuthenticationError(f"authorization failed: {error}")
    if state is not None and query.get("state", [""])[0] != state:
        raise AuthenticationError("authorization failed: state doesn't match the request")
    code = query.get("code", [""])[0]
    if not code:
        raise AuthenticationError(f"authorization didn't include a code: {path!r}")
    return code


class _RedirectHandler(BaseHTTPRequestHandler):
    """Records the redirect path and tells the user they're done."""

    def do_GET(self):  # pylint: disable=invalid-name
        self.server.redirect_path = self.path
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.end_headers()
        self.wfile.write(b"You can now close this window.")

    def log_message(self, format, *args):  # pylint: disable=redefined-builtin
        logger.debug("redirect server: " + format, *args)


def wait_for_code(port: int, open_url: Callable[[], Any], state: Optional[str] = None) -> str:
    """Serve one redirect on 127.0.0.1:``port`` and return its code.

    ``open_url`` is called once the server is listening, so the browser
    can't race it.
    """
    try:
        server = HTTPServer(("127.0.0.1", port), _RedirectHandler)
    except OSError as e:
        raise AuthenticationError(f"couldn't listen on port {port}: {e}") from e
    server.redirect_path = ""
    with server:
        open_url()
        # Ignore stray requests (e.g. /favicon.ico) until the redirect arrives
        while True:
            server.handle_request()
            path = server.redirect_path
            if urlparse(path).path in ("", "/"):
                break
            logger.debug("ignoring request for %s", path)
    return code_from_redirect(path, state)


def exchange_code(
    oauth: OAuth2Session, client_secret: str, code: str, settings: Optional[Settings] = None
) -> Dict[str, Any]:
    """Trade an authorization code for a token response.

    Returns:
        The token response; ``access_token`` is guaranteed present.

    Raises:
        AuthenticationError: If the request fails or Strava doesn't hand out
            a token.
    """
    settings = settings or Settings()
    try:
        token = oauth.fetch_token(
            settings.token_url,
            code=code,
            client_secret=client_secret,
            include_client_id=True,
            timeout=settings.request_timeout,
        )
    except (OAuth2Error, requests.RequestException, ValueError) as e:
        raise AuthenticationError(f"authentication failed at POST {settings.token_url}: {e}") from e
    return dict(token)


def authenticate(
    client_id: str,
    client_secret: str,
    port: int = DEFAULT_AUTH_PORT,
    read_only: bool = False,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Run the whole browser flow and return the token response."""
    settings = settings or Settings()
    oauth = oauth_session(client_id, port, read_only)
    url, state = oauth.authorization_url(settings.authorize_url)
    print(
        f"🔐 Pointing your browser to {url}\n"
        "   If it doesn't work, please copy the URL and paste it into your browser."
    )
    code = wait_for_code(port, lambda: webbrowser.open(url), state)
    logger.debug("got code %s", code)
    return exchange_code(oauth, client_secret, code, settings)
