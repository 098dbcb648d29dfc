"""Slash-command music cog delegating to the per-guild playback controller."""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from desuu_prime.application.services.queue_models import LoadOutcome, LoadOutcomeKind
from desuu_prime.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from desuu_prime.infrastructure.discord.guards.voice_guards import (
    ensure_same_channel,
    ensure_voice,
    get_member,
    send_ephemeral,
)
from desuu_prime.utils.reply import format_duration, format_position, truncate

if TYPE_CHECKING:
    from ....application.services.playback_controller import PlaybackController
    from ....config.container import Container

logger = logging.getLogger(__name__)

QUEUE_PREVIEW = 10

# Outcomes that mean something was already playing when the request landed.
_CONFIRM_WITH_NOTIFICATION = (LoadOutcomeKind.QUEUED, LoadOutcomeKind.PLAYLIST_QUEUED)


def describe_outcome(outcome: LoadOutcome) -> str:
    """Turn a load outcome into the user-facing reply."""
    title = truncate(outcome.item.title) if outcome.item is not None else outcome.identifier
    match outcome.kind:
        case LoadOutcomeKind.STARTED:
            return DiscordUIMessages.NOW_PLAYING.format(title=title)
        case LoadOutcomeKind.QUEUED:
            position = (outcome.position or 0) + 1
            return DiscordUIMessages.QUEUED_AT.format(title=title, position=position)
        case LoadOutcomeKind.PLAYLIST_STARTED:
            return DiscordUIMessages.PLAYLIST_STARTED.format(
                title=title, count=outcome.count - 1, playlist=outcome.playlist_name
            )
        case LoadOutcomeKind.PLAYLIST_QUEUED:
            return DiscordUIMessages.PLAYLIST_QUEUED.format(
                count=outcome.count, playlist=outcome.playlist_name
            )
        case LoadOutcomeKind.START_FAILED:
            return DiscordUIMessages.ERROR_START_FAILED.format(title=title)
        case LoadOutcomeKind.NO_MATCHES:
            return DiscordUIMessages.ERROR_NO_MATCHES.format(query=truncate(outcome.identifier))
        case LoadOutcomeKind.LOAD_FAILED:
            return DiscordUIMessages.ERROR_LOAD_FAILED.format(
                query=truncate(outcome.identifier), reason=outcome.reason
            )
        case _:
            return DiscordUIMessages.STATE_DROPPED


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._notification_sound: str | None = None

    async def cog_load(self) -> None:
        audio = self.container.settings.audio
        if not audio.notify_on_play:
            return
        path = Path(audio.notification_sound)
        if path.is_file():
            self._notification_sound = str(path.resolve())
        else:
            logger.warning(LogTemplates.NOTIFY_SOUND_MISSING, path)

    def _controller(self, guild_id: int) -> PlaybackController:
        return self.container.session_registry.controller_for(guild_id)

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL, search query or file.")
    @app_commands.describe(query="URL, playlist URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        await interaction.response.defer()
        if not await ensure_voice(interaction, self.container.voice_adapter):
            return

        assert interaction.guild is not None
        guild_id = interaction.guild.id

        outcome = await self._controller(guild_id).load_and_play(
            query, sink=partial(self._send_outcome, interaction)
        )

        if outcome.kind in _CONFIRM_WITH_NOTIFICATION and self._notification_sound:
            await self.container.session_registry.interrupts_for(guild_id).notify(
                self._notification_sound
            )

    async def _send_outcome(self, interaction: discord.Interaction, outcome: LoadOutcome) -> None:
        await interaction.followup.send(describe_outcome(outcome), ephemeral=not outcome.success)

    # ─────────────────────────────────────────────────────────────────
    # Controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the current track.")
    async def skip(self, interaction: discord.Interaction) -> None:
        if not await ensure_same_channel(interaction, self.container.voice_adapter):
            return

        assert interaction.guild is not None
        skipped = self._controller(interaction.guild.id).skip()
        if skipped is None:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_NOTHING_TO_SKIP)
            return
        await interaction.response.send_message(
            DiscordUIMessages.SKIPPED.format(title=truncate(skipped.title))
        )

    @app_commands.command(name="pause", description="Pause the current track.")
    async def pause(self, interaction: discord.Interaction) -> None:
        if not await ensure_same_channel(interaction, self.container.voice_adapter):
            return

        assert interaction.guild is not None
        self._controller(interaction.guild.id).pause()
        await interaction.response.send_message(DiscordUIMessages.PAUSED)

    @app_commands.command(name="resume", description="Resume paused playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        if not await ensure_same_channel(interaction, self.container.voice_adapter):
            return

        assert interaction.guild is not None
        self._controller(interaction.guild.id).resume()
        await interaction.response.send_message(DiscordUIMessages.RESUMED)

    @app_commands.command(name="shuffle", description="Shuffle the upcoming tracks.")
    async def shuffle(self, interaction: discord.Interaction) -> None:
        if not await ensure_same_channel(interaction, self.container.voice_adapter):
            return

        assert interaction.guild is not None
        count = self._controller(interaction.guild.id).shuffle()
        await interaction.response.send_message(DiscordUIMessages.SHUFFLED.format(count=count))

    # ─────────────────────────────────────────────────────────────────
    # Voice
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="join", description="Join your voice channel.")
    async def join(self, interaction: discord.Interaction) -> None:
        if not await ensure_voice(interaction, self.container.voice_adapter):
            return

        member = await get_member(interaction)
        channel = member.voice.channel if member and member.voice else None
        await interaction.response.send_message(
            DiscordUIMessages.JOINED.format(channel=getattr(channel, "name", "voice"))
        )

    @app_commands.command(name="leave", description="Stop playback, clear the queue and leave.")
    async def leave(self, interaction: discord.Interaction) -> None:
        if not await ensure_same_channel(interaction, self.container.voice_adapter):
            return

        assert interaction.guild is not None
        drained = self._controller(interaction.guild.id).reset()
        await self.container.voice_adapter.disconnect(interaction.guild.id)
        await interaction.response.send_message(DiscordUIMessages.LEFT.format(count=drained))

    # ─────────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the upcoming tracks.")
    async def queue(self, interaction: discord.Interaction) -> None:
        if not interaction.guild:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_GUILD_ONLY)
            return

        info = self._controller(interaction.guild.id).queue_info()
        if info.current_item is None and not info.upcoming_items:
            await send_ephemeral(interaction, DiscordUIMessages.QUEUE_EMPTY)
            return

        embed = discord.Embed(title=DiscordUIMessages.QUEUE_TITLE, color=discord.Color.blurple())
        if info.current_item is not None:
            embed.add_field(
                name="🎵 Now Playing",
                value=f"**{truncate(info.current_item.title)}**\n"
                f"Duration: {info.current_item.duration_formatted}",
                inline=False,
            )

        for idx, item in enumerate(info.upcoming_items[:QUEUE_PREVIEW], start=1):
            embed.add_field(
                name=f"{idx}. {truncate(item.title)}",
                value=item.duration_formatted,
                inline=False,
            )

        remaining = info.total_length - QUEUE_PREVIEW
        if remaining > 0:
            embed.add_field(
                name="​", value=DiscordUIMessages.QUEUE_MORE.format(count=remaining)
            )
        if info.total_duration_ms:
            embed.set_footer(text=f"Total duration: {format_duration(info.total_duration_ms / 1000)}")

        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="nowplaying", description="Show the current track.")
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        if not interaction.guild:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_GUILD_ONLY)
            return

        item = self._controller(interaction.guild.id).now_playing
        if item is None:
            await send_ephemeral(interaction, DiscordUIMessages.NOTHING_PLAYING)
            return

        embed = discord.Embed(
            title=DiscordUIMessages.NOW_PLAYING_TITLE,
            description=f"**{truncate(item.title)}**",
            url=item.webpage_url,
            color=discord.Color.green(),
        )
        embed.add_field(name="Position", value=format_position(item.position_ms, item.duration_ms))
        await interaction.response.send_message(embed=embed, ephemeral=True)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
