"""Tests for client.py — bearer injection and 401 refresh-retry."""
from __future__ import annotations

import json
from unittest.mock import MagicMock

import httpx
import pytest

from nowplaying_status.client import AuthorizedClient
from nowplaying_status.utils.errors import NotAuthorizedError
from conftest import make_response


@pytest.fixture
def client(mock_session):
    c = AuthorizedClient(mock_session, http=MagicMock())
    return c


def test_get_sends_bearer(client):
    client._http.request.return_value = make_response(200)
    client.get("https://api.example.com/me")

    args, kwargs = client._http.request.call_args
    assert args == ("GET", "https://api.example.com/me")
    assert kwargs["headers"]["Authorization"] == "Bearer test-token"
    assert "Content-Type" not in kwargs["headers"]


def test_post_sends_json(client):
    client._http.request.return_value = make_response(200)
    client.post("https://api.example.com/profile", body={"about": "hi"})

    kwargs = client._http.request.call_args[1]
    assert kwargs["json"] == {"about": "hi"}
    assert kwargs["headers"] == {"Authorization": "Bearer test-token"}


def test_post_body_is_json_on_the_wire(mock_session):
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    client = AuthorizedClient(mock_session, http=httpx.Client(transport=httpx.MockTransport(_handler)))
    client.post("https://api.example.com/profile", body={"about": "hi"})

    assert seen[0].headers["content-type"] == "application/json"
    assert json.loads(seen[0].content) == {"about": "hi"}
    assert seen[0].headers["authorization"] == "Bearer test-token"


def test_401_refreshes_and_retries_once(client, mock_session):
    mock_session.get_access_token.side_effect = ["stale-token", "fresh-token"]
    client._http.request.side_effect = [make_response(401), make_response(200)]

    resp = client.get("https://api.example.com/me")
    assert resp.status_code == 200
    mock_session.get_access_token.assert_called_with(force_refresh=True)
    second_headers = client._http.request.call_args_list[1][1]["headers"]
    assert second_headers["Authorization"] == "Bearer fresh-token"


def test_second_401_is_returned(client):
    client._http.request.side_effect = [make_response(401), make_response(401)]
    resp = client.get("https://api.example.com/me")
    assert resp.status_code == 401
    assert client._http.request.call_count == 2


def test_auth_error_propagates(client, mock_session):
    mock_session.get_access_token.side_effect = NotAuthorizedError("Not authorized")
    with pytest.raises(NotAuthorizedError):
        client.get("https://api.example.com/me")
    client._http.request.assert_not_called()


def test_close_closes_session(client, mock_session):
    http = client._http
    client.close()
    http.close.assert_called_once()
    mock_session.close.assert_called_once()
