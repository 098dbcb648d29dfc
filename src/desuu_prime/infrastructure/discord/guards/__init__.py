"""Voice channel guard functions for Discord cogs."""

from desuu_prime.infrastructure.discord.guards.voice_guards import (
    ensure_same_channel,
    ensure_voice,
    get_member,
    send_ephemeral,
)

__all__ = [
    "ensure_same_channel",
    "ensure_voice",
    "get_member",
    "send_ephemeral",
]
