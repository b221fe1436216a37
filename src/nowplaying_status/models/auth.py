"""Auth-related data models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, field_validator


class TokenResponse(BaseModel):
    """Response from an OAuth2 token endpoint."""
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600
    refresh_token: str | None = None
    scope: str | None = None

    def to_credential(self, fallback_refresh_token: str | None = None) -> Credential:
        """Build a Credential, keeping ``fallback_refresh_token`` when none was issued."""
        refresh_token = self.refresh_token or fallback_refresh_token
        if not refresh_token:
            raise ValueError("token response carries no refresh token")
        return Credential(
            access_token=self.access_token,
            refresh_token=refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=self.expires_in),
        )


class Credential(BaseModel):
    """Access/refresh token pair with an absolute expiry instant."""
    access_token: str
    refresh_token: str
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps in hand-edited files are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, buffer: timedelta = timedelta(0), now: datetime | None = None) -> bool:
        """True unless the expiry is strictly later than ``now + buffer``."""
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now + buffer


class TokenStatus(BaseModel):
    """Current state of the stored access token."""
    has_token: bool
    is_expired: bool
    expires_at: datetime | None = None
    seconds_remaining: int | None = None
