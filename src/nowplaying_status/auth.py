"""OAuth2 authorization-code flow with persisted, auto-refreshing tokens.

Handles the first-time code exchange, token refresh and expiry tracking.
"""

from __future__ import annotations

import logging
import urllib.parse
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx
from pydantic import ValidationError

from nowplaying_status.callback import CallbackReceiver
from nowplaying_status.config import OAuthProvider
from nowplaying_status.credentials import CredentialStore
from nowplaying_status.models.auth import Credential, TokenResponse, TokenStatus
from nowplaying_status.utils.errors import AuthError, NotAuthorizedError

logger = logging.getLogger(__name__)

# Refresh slightly early so a token does not lapse mid-request
EXPIRY_BUFFER = timedelta(seconds=30)

DEFAULT_TIMEOUT = 10.0


class OAuthSession:
    """Issues valid bearer tokens for one OAuth2 provider."""

    def __init__(
        self,
        provider: OAuthProvider,
        store: CredentialStore,
        http: httpx.Client | None = None,
    ) -> None:
        self._provider = provider
        self._store = store
        self._http = http or httpx.Client(timeout=DEFAULT_TIMEOUT)

    @property
    def provider(self) -> OAuthProvider:
        return self._provider

    # ── first-time flow ───────────────────────────────────────────────

    def authorization_url(self) -> str:
        """URL the user must visit to grant access."""
        query = urllib.parse.urlencode({
            "client_id": self._provider.client_id,
            "response_type": "code",
            "scope": self._provider.scope,
            "redirect_uri": self._provider.redirect_uri,
        })
        return f"{self._provider.authorize_url}?{query}"

    def exchange_code(self, code: str) -> Credential:
        """Exchange an authorization code for a credential and store it.

        Raises:
            AuthError: The exchange failed; nothing was stored.
            OSError: The credential could not be written.
        """
        token_data = self._token_request({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._provider.redirect_uri,
        })
        try:
            credential = token_data.to_credential()
        except ValueError as e:
            raise AuthError(f"Authorization failed: {e}") from e

        self._store.save(credential)
        logger.info("Authorized; credential saved to %s", self._store.path)
        return credential

    def authorize(
        self,
        receiver_factory: Callable[[str], CallbackReceiver] = CallbackReceiver.from_redirect_uri,
        timeout: float | None = None,
    ) -> None:
        """Run the interactive first-time flow unless a credential is already stored."""
        if self.is_authorized():
            logger.info("Already authorized (%s)", self._store.path)
            return

        receiver = receiver_factory(self._provider.redirect_uri)
        logger.info("Please go to this URL and authorize:\n%s", self.authorization_url())
        code = receiver.wait_for_code(timeout=timeout)
        self.exchange_code(code)

    # ── refresh flow ──────────────────────────────────────────────────

    def refresh(self, refresh_token: str) -> Credential:
        """Exchange a refresh token for a new credential and store it.

        The prior refresh token is kept when the provider does not issue one.
        On failure the stored credential is left as it was.
        """
        token_data = self._token_request({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        credential = token_data.to_credential(fallback_refresh_token=refresh_token)

        try:
            self._store.save(credential)
        except OSError as e:
            logger.error("Could not persist refreshed credential to %s: %s", self._store.path, e)
            self._store.remember(credential)
        return credential

    def get_access_token(self, force_refresh: bool = False) -> str:
        """Get a valid access token, refreshing if needed.

        Raises:
            NotAuthorizedError: No credential is stored.
            AuthError: The refresh failed.
        """
        credential = self.require_authorized()
        if force_refresh or credential.is_expired(EXPIRY_BUFFER):
            logger.info("Access token expired, refreshing")
            credential = self.refresh(credential.refresh_token)
        return credential.access_token

    # ── status ────────────────────────────────────────────────────────

    def is_authorized(self) -> bool:
        return self._store.get() is not None

    def require_authorized(self) -> Credential:
        credential = self._store.get()
        if credential is None:
            raise NotAuthorizedError(
                f"Not authorized: no credential in {self._store.path}"
            )
        return credential

    def get_status(self) -> TokenStatus:
        """Get the current token status."""
        credential = self._store.get()
        if credential is None:
            return TokenStatus(has_token=False, is_expired=True)

        now = datetime.now(timezone.utc)
        is_expired = credential.is_expired(now=now)
        seconds_remaining = None
        if not is_expired:
            seconds_remaining = int((credential.expires_at - now).total_seconds())

        return TokenStatus(
            has_token=True,
            is_expired=is_expired,
            expires_at=credential.expires_at,
            seconds_remaining=seconds_remaining,
        )

    # ── internals ─────────────────────────────────────────────────────

    def _token_request(self, form: dict[str, str]) -> TokenResponse:
        """POST to the token endpoint with basic client authentication."""
        grant = form["grant_type"]
        try:
            response = self._http.post(
                self._provider.token_url,
                data=form,
                auth=(self._provider.client_id, self._provider.client_secret),
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Token request ({grant}) failed: {e}") from e

        if not 200 <= response.status_code < 300:
            error_detail = response.text
            try:
                error_json = response.json()
                if isinstance(error_json, dict):
                    error_detail = error_json.get("error_description") or error_json.get("error", response.text)
            except ValueError:
                pass
            raise AuthError(
                f"Token request ({grant}) failed (HTTP {response.status_code}): {error_detail}"
            )

        try:
            return TokenResponse(**response.json())
        except (ValueError, TypeError, ValidationError) as e:
            raise AuthError(f"Malformed token response ({grant}): {e}") from e

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
