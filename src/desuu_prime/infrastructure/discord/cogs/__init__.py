"""Discord cogs - command handlers."""

from desuu_prime.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = [
    "MusicCog",
]
