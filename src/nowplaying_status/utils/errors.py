"""Error types and human-readable error reporting."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


class NowPlayingError(Exception):
    """Base class for all errors raised by nowplaying-status."""


class ConfigError(NowPlayingError):
    """Configuration file is missing or invalid."""


class AuthError(NowPlayingError):
    """Authorization code exchange or token refresh failed."""


class NotAuthorizedError(AuthError):
    """No credential has been stored yet."""


class SourceError(NowPlayingError):
    """The music source could not be read."""


class UnknownPlayerStateError(SourceError):
    """The local player reported a state we do not know about."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Unknown player state: {raw!r}")
        self.raw = raw


class SinkError(NowPlayingError):
    """The rendered text could not be published."""


# Actionable hints keyed by error substring
_ERROR_HINTS: list[tuple[str, str]] = [
    ("not authorized", "Run `nowplaying-status auth login` to authorize"),
    ("invalid_grant", "Refresh token was revoked: delete the token file and run `nowplaying-status auth login`"),
    ("401", "Credential rejected: run `nowplaying-status auth refresh`"),
    ("config", "Check config.yaml, or run `nowplaying-status config init`"),
    ("client_id", "Set the client id/secret in your .env file"),
    ("address already in use", "Port for the callback receiver is busy: stop the other process"),
    ("permission denied", "Check file permissions on the token file and its directory"),
    ("timeout", "Request timed out: check network connectivity"),
    ("timed out", "Request timed out: check network connectivity"),
    ("connection", "Connection error: check network connectivity"),
]


def _get_hint(error_message: str) -> str | None:
    """Match an error message to an actionable hint."""
    lower = error_message.lower()
    for pattern, hint in _ERROR_HINTS:
        if pattern.lower() in lower:
            return hint
    return None


def handle_error(error: Exception) -> None:
    """Print a human-readable error and, when one matches, a hint to stderr."""
    message = str(error) or error.__class__.__name__
    hint = _get_hint(message)

    console.print(f"[red]Error:[/red] {escape(message)}")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")
