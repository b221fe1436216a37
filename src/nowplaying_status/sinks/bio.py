"""Sink that overwrites the Telegram account bio through a user session.

The session is a Telethon session file: it is created on the first
interactive login (phone number, login code and, when two-step
verification is on, the account password) and reused on later runs.
"""

from __future__ import annotations

import logging

from telethon.errors import RPCError
from telethon.sync import TelegramClient
from telethon.tl.functions.account import UpdateProfileRequest

from nowplaying_status.models.auth import TokenStatus
from nowplaying_status.utils.errors import AuthError, NotAuthorizedError, SinkError

logger = logging.getLogger(__name__)


def create_client(session_file: str, api_id: int, api_hash: str) -> TelegramClient:
    """Telethon client bound to ``session_file`` (created if missing)."""
    return TelegramClient(session_file, api_id, api_hash)


class TelegramLogin:
    """User-session counterpart of ``OAuthSession`` for the bio sink.

    Exposes the same setup surface (``authorize``, ``require_authorized``,
    ``is_authorized``, ``get_status``, ``close``) so commands can treat both
    kinds of login alike.
    """

    def __init__(self, client: TelegramClient, session_file: str, phone: str = "") -> None:
        self._client = client
        self._session_file = session_file
        self._phone = phone

    @property
    def client(self) -> TelegramClient:
        return self._client

    def is_authorized(self) -> bool:
        try:
            if not self._client.is_connected():
                self._client.connect()
            return bool(self._client.is_user_authorized())
        except (RPCError, OSError) as e:
            raise AuthError(f"Could not reach Telegram: {e}") from e

    def require_authorized(self) -> None:
        if not self.is_authorized():
            raise NotAuthorizedError(f"Not authorized: no Telegram session in {self._session_file}")

    def authorize(self, timeout: float | None = None) -> None:
        """Sign in on the terminal unless the session file is already signed in.

        ``timeout`` is accepted for parity with ``OAuthSession.authorize``; the
        prompts wait for the user.
        """
        if self.is_authorized():
            logger.info("Already signed in (%s)", self._session_file)
            return

        kwargs = {"phone": self._phone} if self._phone else {}
        try:
            self._client.start(**kwargs)
        except (RPCError, OSError, RuntimeError) as e:
            raise AuthError(f"Telegram sign-in failed: {e}") from e
        logger.info("Signed in, session saved to %s", self._session_file)

    def get_status(self) -> TokenStatus:
        # User sessions carry no expiry
        return TokenStatus(has_token=self.is_authorized(), is_expired=False)

    def close(self) -> None:
        if self._client.is_connected():
            self._client.disconnect()


class BioSink:
    """Sets the account's "about" text with ``account.updateProfile``."""

    def __init__(self, login: TelegramLogin) -> None:
        self._login = login

    def publish(self, text: str) -> None:
        try:
            self._login.client(UpdateProfileRequest(about=text))
        except RPCError as e:
            raise SinkError(f"Bio update rejected: {e}") from e
        except OSError as e:
            raise SinkError(f"Bio update request failed: {e}") from e

    def close(self) -> None:
        self._login.close()
