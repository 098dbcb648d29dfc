"""Tests for the voice channel guards used by slash commands."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from desuu_prime.domain.shared.messages import DiscordUIMessages
from desuu_prime.infrastructure.discord.guards.voice_guards import (
    ensure_same_channel,
    ensure_voice,
    get_member,
    send_ephemeral,
)


def _make_interaction(
    *,
    user_is_member: bool = True,
    in_voice: bool = True,
    user_channel_id: int = 100,
    in_guild: bool = True,
    responded: bool = False,
) -> MagicMock:
    interaction = MagicMock(spec=discord.Interaction)
    interaction.response = MagicMock()
    interaction.response.is_done.return_value = responded
    interaction.response.send_message = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()

    if user_is_member:
        user = MagicMock(spec=discord.Member)
        if in_voice:
            user.voice = MagicMock()
            user.voice.channel = MagicMock()
            user.voice.channel.id = user_channel_id
        else:
            user.voice = None
    else:
        user = MagicMock(spec=discord.User)
    interaction.user = user

    if in_guild:
        interaction.guild = MagicMock()
        interaction.guild.id = 1
    else:
        interaction.guild = None
    return interaction


def _sent_message(interaction: MagicMock) -> str:
    return interaction.response.send_message.call_args[0][0]


@pytest.fixture
def voice_adapter():
    adapter = MagicMock()
    adapter.get_current_channel_id.return_value = None
    adapter.ensure_connected = AsyncMock(return_value=True)
    return adapter


# =============================================================================
# send_ephemeral / get_member
# =============================================================================


@pytest.mark.asyncio
async def test_send_ephemeral_uses_response_first():
    interaction = _make_interaction()

    await send_ephemeral(interaction, "hi")

    interaction.response.send_message.assert_awaited_once_with("hi", ephemeral=True)
    interaction.followup.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_ephemeral_uses_followup_after_defer():
    interaction = _make_interaction(responded=True)

    await send_ephemeral(interaction, "hi")

    interaction.followup.send.assert_awaited_once_with("hi", ephemeral=True)


@pytest.mark.asyncio
async def test_get_member_outside_guild():
    interaction = _make_interaction(in_guild=False)

    assert await get_member(interaction) is None
    assert _sent_message(interaction) == DiscordUIMessages.ERROR_GUILD_ONLY


@pytest.mark.asyncio
async def test_get_member_non_member_user():
    interaction = _make_interaction(user_is_member=False)

    assert await get_member(interaction) is None
    assert _sent_message(interaction) == DiscordUIMessages.ERROR_GUILD_ONLY


@pytest.mark.asyncio
async def test_get_member_returns_member():
    interaction = _make_interaction()
    assert await get_member(interaction) is interaction.user


# =============================================================================
# ensure_voice
# =============================================================================


@pytest.mark.asyncio
async def test_ensure_voice_user_not_in_voice(voice_adapter):
    interaction = _make_interaction(in_voice=False)

    assert await ensure_voice(interaction, voice_adapter) is False
    assert _sent_message(interaction) == DiscordUIMessages.ERROR_NOT_IN_VOICE
    voice_adapter.ensure_connected.assert_not_awaited()


@pytest.mark.asyncio
async def test_ensure_voice_already_in_same_channel(voice_adapter):
    voice_adapter.get_current_channel_id.return_value = 100
    interaction = _make_interaction()

    assert await ensure_voice(interaction, voice_adapter) is True
    voice_adapter.ensure_connected.assert_not_awaited()


@pytest.mark.asyncio
async def test_ensure_voice_connects(voice_adapter):
    interaction = _make_interaction(user_channel_id=200)

    assert await ensure_voice(interaction, voice_adapter) is True
    voice_adapter.ensure_connected.assert_awaited_once_with(1, 200)


@pytest.mark.asyncio
async def test_ensure_voice_connect_failure(voice_adapter):
    voice_adapter.ensure_connected.return_value = False
    interaction = _make_interaction()

    assert await ensure_voice(interaction, voice_adapter) is False
    assert _sent_message(interaction) == DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE


# =============================================================================
# ensure_same_channel
# =============================================================================


@pytest.mark.asyncio
async def test_same_channel_bot_not_connected(voice_adapter):
    interaction = _make_interaction()

    assert await ensure_same_channel(interaction, voice_adapter) is False
    assert _sent_message(interaction) == DiscordUIMessages.ERROR_BOT_NOT_CONNECTED


@pytest.mark.asyncio
@pytest.mark.parametrize("in_voice, user_channel_id", [(False, 100), (True, 999)])
async def test_same_channel_user_elsewhere(voice_adapter, in_voice, user_channel_id):
    voice_adapter.get_current_channel_id.return_value = 100
    interaction = _make_interaction(in_voice=in_voice, user_channel_id=user_channel_id)

    assert await ensure_same_channel(interaction, voice_adapter) is False
    assert _sent_message(interaction) == DiscordUIMessages.ERROR_NOT_SAME_CHANNEL


@pytest.mark.asyncio
async def test_same_channel_ok(voice_adapter):
    voice_adapter.get_current_channel_id.return_value = 100
    interaction = _make_interaction()

    assert await ensure_same_channel(interaction, voice_adapter) is True
    interaction.response.send_message.assert_not_awaited()
