"""Shared fixtures for the nowplaying-status test suite."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from nowplaying_status.config import OAuthProvider
from nowplaying_status.credentials import CredentialStore
from nowplaying_status.models.auth import Credential


@pytest.fixture
def fake_provider() -> OAuthProvider:
    return OAuthProvider(
        client_id="test-client-id",
        client_secret="test-client-secret",
        authorize_url="https://accounts.example.com/authorize",
        token_url="https://accounts.example.com/api/token",
        scope="user-read-currently-playing",
        redirect_uri="http://127.0.0.1:3000",
    )


@pytest.fixture
def token_path(tmp_path):
    return tmp_path / "token.json"


@pytest.fixture
def store(token_path) -> CredentialStore:
    return CredentialStore(token_path)


def make_credential(access_token="tok-old", refresh_token="refresh-old", expires_in=3600) -> Credential:
    """Credential expiring ``expires_in`` seconds from now (negative = already expired)."""
    return Credential(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    )


def make_response(status_code=200, json_data=None, text=""):
    """Build a fake httpx.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data if json_data is not None else {}
    return resp


@pytest.fixture
def mock_session():
    """MagicMock standing in for OAuthSession."""
    session = MagicMock()
    session.get_access_token.return_value = "test-token"
    return session
