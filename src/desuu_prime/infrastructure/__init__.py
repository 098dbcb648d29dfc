"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice and playback adapters)
- Audio (yt-dlp resolution, FFmpeg sources)
"""

from desuu_prime.infrastructure.discord.adapters.playback_backend import DiscordPlaybackBackend
from desuu_prime.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from desuu_prime.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordPlaybackBackend",
    "DiscordVoiceAdapter",
]
