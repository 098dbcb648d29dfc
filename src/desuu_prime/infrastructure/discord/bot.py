"""Main Discord bot class integrating the DI container, cog lifecycle and command sync."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from desuu_prime.domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

EXTENSIONS = ("desuu_prime.infrastructure.discord.cogs.music_cog",)


class DesuuBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs,
    ) -> None:
        intents = discord.Intents.default()
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=intents,
            help_command=None,
            owner_ids=set(settings.discord.owner_ids) or None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        container.set_bot(self)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)

        await self.container.initialize()
        await self._load_cogs()
        self.tree.on_error = self._on_app_command_error

        if self.settings.discord.sync_on_startup:
            await self._sync_commands()

        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def _load_cogs(self) -> None:
        for extension in EXTENSIONS:
            try:
                await self.load_extension(extension)
                logger.info(LogTemplates.COG_LOADED, extension)
            except commands.ExtensionError:
                logger.exception(LogTemplates.COG_LOAD_FAILED, extension)

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        """Global slash-command error handler; replies are ephemeral to avoid channel spam."""
        if isinstance(error, app_commands.CommandOnCooldown):
            message = DiscordUIMessages.ERROR_COMMAND_COOLDOWN.format(seconds=error.retry_after)
        elif isinstance(error, app_commands.MissingPermissions | app_commands.CheckFailure):
            message = DiscordUIMessages.ERROR_MISSING_PERMISSIONS
        else:
            original = getattr(error, "original", error)
            logger.error(
                LogTemplates.COMMAND_ERROR,
                getattr(interaction.command, "name", "<unknown>"),
                exc_info=original,
            )
            message = DiscordUIMessages.ERROR_COMMAND_FAILED

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException:
            logger.warning(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)

    async def _sync_commands(self) -> None:
        for guild_id in self.settings.discord.test_guild_ids:
            guild = discord.Object(id=guild_id)
            try:
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info(LogTemplates.COMMANDS_SYNCED_GUILD, len(synced), guild_id)
            except discord.HTTPException:
                logger.exception(LogTemplates.COMMANDS_SYNC_FAILED)

        try:
            synced = await self.tree.sync()
            logger.info(LogTemplates.COMMANDS_SYNCED_GLOBAL, len(synced))
        except discord.HTTPException:
            logger.exception(LogTemplates.COMMANDS_SYNC_FAILED)

    async def on_ready(self) -> None:
        logger.info(
            LogTemplates.BOT_READY,
            self.user,  # type: ignore
            self.user.id,  # type: ignore
        )
        logger.info(LogTemplates.BOT_CONNECTED_GUILDS, len(self.guilds))

        activity = discord.Activity(type=discord.ActivityType.listening, name="/play")
        await self.change_presence(activity=activity)

    async def close(self) -> None:
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)

        await self.container.shutdown()

        for vc in list(self.voice_clients):
            try:
                await vc.disconnect(force=True)
            except Exception as e:
                logger.warning(
                    LogTemplates.BOT_VOICE_CLOSE_FAILED, getattr(vc.channel, "guild", None), e
                )

        await super().close()

    def run_with_graceful_shutdown(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        async def runner():
            async with self:
                loop = asyncio.get_running_loop()

                async def _graceful_close() -> None:
                    try:
                        await asyncio.wait_for(self.close(), timeout=shutdown_timeout)
                    except TimeoutError:
                        logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, shutdown_timeout)

                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, lambda: asyncio.create_task(_graceful_close()))
                await self.start(token)

        asyncio.run(runner())


def create_bot(container: Container, settings: Settings) -> DesuuBot:
    return DesuuBot(container=container, settings=settings)
