"""Build sources, sinks and their logins from configuration."""

from __future__ import annotations

from typing import Union

from nowplaying_status.auth import OAuthSession
from nowplaying_status.client import AuthorizedClient
from nowplaying_status.config import (
    AppleMusicSourceConfig,
    BioSinkConfig,
    ChannelSinkConfig,
    Config,
    ProfileSinkConfig,
    SinkConfig,
    SourceConfig,
    SpotifySourceConfig,
)
from nowplaying_status.credentials import CredentialStore
from nowplaying_status.loop import Reconciler
from nowplaying_status.sinks import bio
from nowplaying_status.sinks.base import Sink
from nowplaying_status.sinks.channel import ChannelSink
from nowplaying_status.sinks.profile import ProfileSink
from nowplaying_status.sources.apple_music import AppleMusicSource
from nowplaying_status.sources.base import Source
from nowplaying_status.sources.spotify import SpotifySource

Login = Union[OAuthSession, bio.TelegramLogin]


def build_session(cfg: SpotifySourceConfig | ProfileSinkConfig) -> OAuthSession:
    """OAuth session backed by the section's token file."""
    return OAuthSession(cfg.provider(), CredentialStore(cfg.token_file))


def build_telegram_login(cfg: BioSinkConfig) -> bio.TelegramLogin:
    api_id, api_hash = cfg.api_credentials()
    client = bio.create_client(cfg.session_file, api_id, api_hash)
    return bio.TelegramLogin(client, cfg.session_file, cfg.phone_number())


def session_for(cfg: SourceConfig | SinkConfig) -> Login | None:
    """The login a source/sink section needs before it can run, if any."""
    if isinstance(cfg, (SpotifySourceConfig, ProfileSinkConfig)):
        return build_session(cfg)
    if isinstance(cfg, BioSinkConfig):
        return build_telegram_login(cfg)
    return None


def build_source(cfg: SourceConfig, session: OAuthSession | None = None) -> Source:
    if isinstance(cfg, SpotifySourceConfig):
        return SpotifySource(AuthorizedClient(session or build_session(cfg)))
    if isinstance(cfg, AppleMusicSourceConfig):
        return AppleMusicSource(osascript=cfg.osascript)
    raise TypeError(f"Unsupported source kind: {cfg!r}")


def build_sink(cfg: SinkConfig, session: Login | None = None) -> Sink:
    if isinstance(cfg, ProfileSinkConfig):
        client = AuthorizedClient(session or build_session(cfg))
        return ProfileSink(client, cfg.endpoint, cfg.field)
    if isinstance(cfg, BioSinkConfig):
        return bio.BioSink(session or build_telegram_login(cfg))
    if isinstance(cfg, ChannelSinkConfig):
        return ChannelSink(cfg.bot_token(), cfg.chat_id, cfg.message_id, cfg.api_base)
    raise TypeError(f"Unsupported sink kind: {cfg!r}")


def build_reconciler(
    config: Config,
    source_session: OAuthSession | None = None,
    sink_session: Login | None = None,
) -> Reconciler:
    source = build_source(config.source, source_session)
    sink = build_sink(config.sink, sink_session)
    return Reconciler(
        source,
        sink,
        template=config.template,
        default_text=config.default,
        separator=config.separator,
    )
