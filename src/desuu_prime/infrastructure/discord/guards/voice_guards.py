"""Reusable voice-channel guard functions for Discord slash commands.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from desuu_prime.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from ....application.interfaces.voice_adapter import VoiceAdapter


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member. Returns None with error on failure."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_GUILD_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_GUILD_ONLY)
        return None

    return user


async def ensure_voice(interaction: discord.Interaction, voice_adapter: VoiceAdapter) -> bool:
    """Check the user is in voice and connect (or move) the bot to their channel."""
    member = await get_member(interaction)
    if member is None:
        return False

    assert interaction.guild is not None

    if not member.voice or not member.voice.channel:
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_NOT_IN_VOICE)
        return False

    channel_id = member.voice.channel.id
    if voice_adapter.get_current_channel_id(interaction.guild.id) == channel_id:
        return True

    if not await voice_adapter.ensure_connected(interaction.guild.id, channel_id):
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)
        return False
    return True


async def ensure_same_channel(
    interaction: discord.Interaction, voice_adapter: VoiceAdapter
) -> bool:
    """Require the bot to be connected and the user to share its voice channel."""
    member = await get_member(interaction)
    if member is None:
        return False

    assert interaction.guild is not None

    bot_channel_id = voice_adapter.get_current_channel_id(interaction.guild.id)
    if bot_channel_id is None:
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_BOT_NOT_CONNECTED)
        return False

    if not member.voice or not member.voice.channel or member.voice.channel.id != bot_channel_id:
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_NOT_SAME_CHANNEL)
        return False

    return True
