"""CLI tests for the run command."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from nowplaying_status.main import app
from nowplaying_status.utils.errors import AuthError, ConfigError, NotAuthorizedError

runner = CliRunner()


def _config(interval=30):
    config = MagicMock()
    config.interval = interval
    config.source.kind = "spotify"
    config.sink.kind = "channel"
    return config


def _invoke(args, config=None, sessions=(None, None), reconciler=None, load_error=None):
    load = MagicMock(return_value=config or _config(), side_effect=load_error)
    reconciler = reconciler or MagicMock()
    patches = {
        "load_config": load,
        "session_for": MagicMock(side_effect=list(sessions)),
        "build_reconciler": MagicMock(return_value=reconciler),
        "IntervalTicker": MagicMock(),
        "_install_signal_handlers": MagicMock(),
    }
    with patch.multiple("nowplaying_status.commands.run_cmd", **patches):
        result = runner.invoke(app, ["run", *args])
    return result, patches


def test_run_starts_loop():
    reconciler = MagicMock()
    result, patches = _invoke([], reconciler=reconciler)

    assert result.exit_code == 0
    patches["IntervalTicker"].assert_called_once_with(30)
    reconciler.run.assert_called_once_with(patches["IntervalTicker"].return_value)
    reconciler.close.assert_called_once()
    patches["_install_signal_handlers"].assert_called_once()


def test_run_authorizes_interactively():
    source_session = MagicMock()
    result, patches = _invoke(["--auth-timeout", "60"], sessions=(source_session, None))

    assert result.exit_code == 0
    source_session.authorize.assert_called_once_with(timeout=60.0)
    patches["build_reconciler"].assert_called_once()


def test_run_missing_credential_non_interactive_is_fatal():
    source_session = MagicMock()
    source_session.require_authorized.side_effect = NotAuthorizedError("Not authorized: no credential in token.json")
    reconciler = MagicMock()
    result, patches = _invoke(["--no-interactive"], sessions=(source_session, None), reconciler=reconciler)

    assert result.exit_code == 1
    source_session.authorize.assert_not_called()
    patches["build_reconciler"].assert_not_called()
    reconciler.run.assert_not_called()


def test_run_authorization_failure_is_fatal():
    sink_session = MagicMock()
    sink_session.authorize.side_effect = AuthError("Token request (authorization_code) failed (HTTP 400)")
    result, patches = _invoke([], sessions=(None, sink_session))

    assert result.exit_code == 1
    patches["build_reconciler"].assert_not_called()


def test_run_credential_write_failure_is_fatal():
    session = MagicMock()
    session.authorize.side_effect = PermissionError("Permission denied: 'token.json'")
    result, _ = _invoke([], sessions=(session, None))
    assert result.exit_code == 1


def test_run_config_error_is_fatal():
    result, patches = _invoke([], load_error=ConfigError("Invalid config config.yaml"))
    assert result.exit_code == 1
    patches["IntervalTicker"].assert_not_called()


def test_run_closes_sessions_when_second_authorization_fails():
    source_session = MagicMock()
    sink_session = MagicMock()
    sink_session.authorize.side_effect = AuthError("Telegram sign-in failed")
    result, _ = _invoke([], sessions=(source_session, sink_session))

    assert result.exit_code == 1
    source_session.close.assert_called_once()
    sink_session.close.assert_called_once()


def test_run_closes_sessions_when_wiring_fails():
    source_session = MagicMock()
    config = _config()
    with patch.multiple(
        "nowplaying_status.commands.run_cmd",
        load_config=MagicMock(return_value=config),
        session_for=MagicMock(side_effect=[source_session, None]),
        build_reconciler=MagicMock(side_effect=ConfigError("Channel sink bot token missing")),
        IntervalTicker=MagicMock(),
    ):
        result = runner.invoke(app, ["run"])

    assert result.exit_code == 1
    source_session.close.assert_called_once()


def test_run_closes_first_session_when_second_lookup_fails():
    source_session = MagicMock()
    result, patches = _invoke([], sessions=(source_session, ConfigError("Bio sink api_id/api_hash missing")))

    assert result.exit_code == 1
    source_session.close.assert_called_once()
    source_session.authorize.assert_not_called()
