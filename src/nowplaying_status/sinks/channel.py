"""Sink that edits one pinned channel message through the bot API."""

from __future__ import annotations

import logging

import httpx

from nowplaying_status.auth import DEFAULT_TIMEOUT
from nowplaying_status.utils.errors import SinkError

logger = logging.getLogger(__name__)

# The bot API rejects edits that would not change the message
NOT_MODIFIED = "message is not modified"


class ChannelSink:
    """Always edits the same ``(chat_id, message_id)``; never posts a new message."""

    def __init__(
        self,
        token: str,
        chat_id: int | str,
        message_id: int,
        api_base: str = "https://api.telegram.org",
        http: httpx.Client | None = None,
    ) -> None:
        self._url = f"{api_base.rstrip('/')}/bot{token}/editMessageText"
        self._chat_id = chat_id
        self._message_id = message_id
        self._http = http or httpx.Client(timeout=DEFAULT_TIMEOUT)

    def publish(self, text: str) -> None:
        try:
            response = self._http.post(
                self._url,
                json={
                    "chat_id": self._chat_id,
                    "message_id": self._message_id,
                    "text": text,
                },
            )
        except httpx.HTTPError as e:
            # The URL embeds the bot token; keep it out of the message
            raise SinkError(f"editMessageText request failed: {type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise SinkError(
                f"editMessageText returned non-JSON (HTTP {response.status_code})"
            ) from e

        if not isinstance(data, dict):
            raise SinkError(f"Unexpected editMessageText response: {data!r}")
        if data.get("ok"):
            return

        description = str(data.get("description", ""))
        if NOT_MODIFIED in description.lower():
            logger.debug("Message %s already shows this text", self._message_id)
            return
        raise SinkError(
            f"editMessageText failed (HTTP {response.status_code}): {description or 'not ok'}"
        )

    def close(self) -> None:
        self._http.close()
