"""Configuration management for nowplaying-status.

Loads daemon settings from config.yaml and client secrets from .env.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Literal, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from nowplaying_status.utils.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("config.yaml")

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_SCOPE = "user-read-currently-playing"
DEFAULT_REDIRECT_URI = "http://127.0.0.1:3000"

DEFAULT_CONFIG_TEXT = """\
# Seconds between polls of the music source
interval: 60
# Placeholders: {artist} {title} {progress} {duration}
template: "▶️ {artist} - {title} ({progress} / {duration})"
# Text published when nothing is playing
default: ""
# Joins multiple artists in {artist}
separator: ", "

source:
  kind: spotify            # spotify | apple_music
  token_file: token.json

sink:
  kind: channel            # channel | bio | profile
  token: ""                # bot token, or set TELEGRAM_BOT_TOKEN in .env
  chat_id: 0
  message_id: 0
"""


class OAuthProvider(BaseModel):
    """Endpoints and client credentials for one OAuth2 authorization server."""
    client_id: str
    client_secret: str
    authorize_url: str
    token_url: str
    scope: str
    redirect_uri: str = DEFAULT_REDIRECT_URI


class SpotifySourceConfig(BaseModel):
    kind: Literal["spotify"] = "spotify"
    token_file: str = "token.json"
    client_id: str = Field(default="", description="Falls back to SPOTIFY_CLIENT_ID")
    client_secret: str = Field(default="", description="Falls back to SPOTIFY_CLIENT_SECRET")
    redirect_uri: str = DEFAULT_REDIRECT_URI

    def provider(self) -> OAuthProvider:
        client_id = self.client_id or _env("SPOTIFY_CLIENT_ID", "spotifyClientId")
        client_secret = self.client_secret or _env("SPOTIFY_CLIENT_SECRET", "spotifyClientSecret")
        if not client_id or not client_secret:
            raise ConfigError(
                "Spotify client_id/client_secret missing: set SPOTIFY_CLIENT_ID and "
                "SPOTIFY_CLIENT_SECRET in .env or in the source section of the config"
            )
        return OAuthProvider(
            client_id=client_id,
            client_secret=client_secret,
            authorize_url=SPOTIFY_AUTHORIZE_URL,
            token_url=SPOTIFY_TOKEN_URL,
            scope=SPOTIFY_SCOPE,
            redirect_uri=self.redirect_uri,
        )


class AppleMusicSourceConfig(BaseModel):
    kind: Literal["apple_music"] = "apple_music"
    osascript: str = "osascript"


class ProfileSinkConfig(BaseModel):
    """Profile-field sink: POSTs ``{field: text}`` to ``endpoint`` with a bearer token."""
    kind: Literal["profile"] = "profile"
    endpoint: str
    field: str = "about"
    token_file: str = "profile_token.json"
    authorize_url: str
    token_url: str
    scope: str = ""
    redirect_uri: str = DEFAULT_REDIRECT_URI
    client_id: str = Field(default="", description="Falls back to PROFILE_CLIENT_ID")
    client_secret: str = Field(default="", description="Falls back to PROFILE_CLIENT_SECRET")

    def provider(self) -> OAuthProvider:
        client_id = self.client_id or _env("PROFILE_CLIENT_ID")
        client_secret = self.client_secret or _env("PROFILE_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise ConfigError(
                "Profile sink client_id/client_secret missing: set PROFILE_CLIENT_ID and "
                "PROFILE_CLIENT_SECRET in .env or in the sink section of the config"
            )
        return OAuthProvider(
            client_id=client_id,
            client_secret=client_secret,
            authorize_url=self.authorize_url,
            token_url=self.token_url,
            scope=self.scope,
            redirect_uri=self.redirect_uri,
        )


class BioSinkConfig(BaseModel):
    """Telegram account bio, written through a user session file."""
    kind: Literal["bio"] = "bio"
    api_id: int = Field(default=0, description="Falls back to TELEGRAM_API_ID")
    api_hash: str = Field(default="", description="Falls back to TELEGRAM_API_HASH")
    phone: str = Field(default="", description="Falls back to TELEGRAM_PHONE; prompted for when empty")
    session_file: str = "telegram.session"

    def api_credentials(self) -> tuple[int, str]:
        raw_id = _env("TELEGRAM_API_ID")
        try:
            api_id = self.api_id or int(raw_id or 0)
        except ValueError:
            raise ConfigError(f"TELEGRAM_API_ID must be a number, got {raw_id!r}") from None
        api_hash = self.api_hash or _env("TELEGRAM_API_HASH")
        if not api_id or not api_hash:
            raise ConfigError(
                "Bio sink api_id/api_hash missing: set TELEGRAM_API_ID and "
                "TELEGRAM_API_HASH in .env or in the sink section of the config"
            )
        return api_id, api_hash

    def phone_number(self) -> str:
        return self.phone or _env("TELEGRAM_PHONE")


class ChannelSinkConfig(BaseModel):
    """Edits one pre-existing channel message through the bot API."""
    kind: Literal["channel"] = "channel"
    token: str = Field(default="", description="Falls back to TELEGRAM_BOT_TOKEN")
    chat_id: int | str
    message_id: int
    api_base: str = "https://api.telegram.org"

    def bot_token(self) -> str:
        token = self.token or _env("TELEGRAM_BOT_TOKEN", "botToken")
        if not token:
            raise ConfigError("Channel sink bot token missing: set sink.token or TELEGRAM_BOT_TOKEN")
        return token


SourceConfig = Annotated[
    Union[SpotifySourceConfig, AppleMusicSourceConfig],
    Field(discriminator="kind"),
]
SinkConfig = Annotated[
    Union[ProfileSinkConfig, BioSinkConfig, ChannelSinkConfig],
    Field(discriminator="kind"),
]


class Config(BaseModel):
    """Full application configuration."""
    interval: int = Field(default=60, ge=1, description="Poll interval in seconds")
    template: str = "▶️ {artist} - {title} ({progress} / {duration})"
    default: str = Field(default="", description="Text published when nothing is playing")
    separator: str = ", "
    source: SourceConfig = Field(default_factory=SpotifySourceConfig)
    sink: SinkConfig


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def config_path() -> Path:
    """Config location: $NOWPLAYING_CONFIG, else ./config.yaml."""
    return Path(_env("NOWPLAYING_CONFIG", default=str(DEFAULT_CONFIG_PATH)))


def write_default_config(path: Path, force: bool = False) -> bool:
    """Write the commented default config. Returns False if it already exists."""
    if path.exists() and not force:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")
    return True


def load_config(path: Path | None = None) -> Config:
    """Load the configuration, creating a default file on first run.

    Raises:
        ConfigError: The file was just created, or cannot be read or validated.
    """
    path = path or config_path()

    # .env next to the config file, then the working directory
    for env_path in (path.parent / ".env", Path.cwd() / ".env"):
        if env_path.exists():
            load_dotenv(env_path)

    if not path.exists():
        write_default_config(path)
        raise ConfigError(f"Created default config at {path}; edit it and start again")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}:\n{e}") from e
