"""Sink that overwrites one profile field through an OAuth-protected API."""

from __future__ import annotations

import logging

import httpx

from nowplaying_status.client import AuthorizedClient
from nowplaying_status.utils.errors import AuthError, SinkError

logger = logging.getLogger(__name__)


class ProfileSink:
    """POSTs ``{field: text}`` to the profile endpoint.

    Every call is sent, even for repeated text; deduplication belongs to the loop.
    """

    def __init__(self, client: AuthorizedClient, endpoint: str, field: str = "about") -> None:
        self._client = client
        self._endpoint = endpoint
        self._field = field

    def publish(self, text: str) -> None:
        try:
            response = self._client.post(self._endpoint, body={self._field: text})
        except AuthError as e:
            raise SinkError(f"Profile authorization failed: {e}") from e
        except httpx.HTTPError as e:
            raise SinkError(f"Profile update request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise SinkError(
                f"Profile update failed (HTTP {response.status_code}): {response.text}"
            )

    def close(self) -> None:
        self._client.close()
