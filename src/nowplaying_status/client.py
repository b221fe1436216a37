"""HTTP client that injects a bearer token from an OAuth session.

A 401 response forces one token refresh and a single retry.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from nowplaying_status.auth import DEFAULT_TIMEOUT, OAuthSession

logger = logging.getLogger(__name__)


class AuthorizedClient:
    """Thin httpx wrapper for bearer-authenticated API calls."""

    def __init__(
        self,
        session: OAuthSession,
        http: httpx.Client | None = None,
    ) -> None:
        self._session = session
        self._http = http or httpx.Client(timeout=DEFAULT_TIMEOUT)

    def request(
        self,
        method: str,
        url: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make an authenticated request.

        Returns the response as-is (any status); the caller interprets it.

        Raises:
            AuthError: No credential, or the token could not be refreshed.
            httpx.HTTPError: Transport-level failure.
        """
        token = self._session.get_access_token()
        response = self._send(method, url, token, body, params)

        if response.status_code == 401:
            logger.warning("Got 401 from %s, refreshing token and retrying", url)
            token = self._session.get_access_token(force_refresh=True)
            response = self._send(method, url, token, body, params)

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for GET requests."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for POST requests."""
        return self.request("POST", url, **kwargs)

    def _send(
        self,
        method: str,
        url: str,
        token: str,
        body: dict[str, Any] | None,
        params: dict[str, str] | None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"}
        return self._http.request(method, url, headers=headers, json=body, params=params)

    def close(self) -> None:
        """Close the HTTP client and the OAuth session."""
        self._http.close()
        self._session.close()
