"""Dependency Injection Container

Wires the resolver, voice adapter, FFmpeg player and per-guild session
registry together. Components are created on first access and cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import ItemResolver
    from ..application.interfaces.playback_backend import PlaybackBackend
    from ..application.services.session_registry import GuildSessionRegistry
    from ..infrastructure.audio.ffmpeg_player import FFmpegPlayer
    from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    The session registry builds one ``DiscordPlaybackBackend`` per guild,
    bound to the bot's event loop, the first time that guild is touched.
    """

    settings: Settings
    _bot: Bot | None = None

    _audio_resolver: ItemResolver | None = None
    _voice_adapter: DiscordVoiceAdapter | None = None
    _ffmpeg_player: FFmpegPlayer | None = None
    _session_registry: GuildSessionRegistry | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def audio_resolver(self) -> ItemResolver:
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio)
        return self._audio_resolver

    @property
    def voice_adapter(self) -> DiscordVoiceAdapter:
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(self.bot, self.settings.voice)
        return self._voice_adapter

    @property
    def ffmpeg_player(self) -> FFmpegPlayer:
        if self._ffmpeg_player is None:
            from ..infrastructure.audio.ffmpeg_player import FFmpegPlayer

            self._ffmpeg_player = FFmpegPlayer(self.settings.audio)
        return self._ffmpeg_player

    # === Playback ===

    @property
    def session_registry(self) -> GuildSessionRegistry:
        """Get the per-guild playback registry."""
        if self._session_registry is None:
            from ..application.services.session_registry import GuildSessionRegistry

            self._session_registry = GuildSessionRegistry(
                resolver=self.audio_resolver,
                backend_factory=self._create_backend,
            )
        return self._session_registry

    def _create_backend(self, guild_id: int) -> PlaybackBackend:
        from ..infrastructure.discord.adapters.playback_backend import DiscordPlaybackBackend

        return DiscordPlaybackBackend(
            guild_id,
            voice=self.voice_adapter,
            player=self.ffmpeg_player,
            loop=self.bot.loop,
        )

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Build the long-lived components before any command runs."""
        _ = self.session_registry
        _ = self.voice_adapter

    async def shutdown(self) -> None:
        """Reset every guild so no playback outlives the bot."""
        reset = 0
        if self._session_registry is not None:
            for guild_id in self._session_registry.guild_ids():
                self._session_registry.controller_for(guild_id).reset()
                reset += 1
        logger.info(LogTemplates.CONTAINER_SHUTDOWN, reset)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
