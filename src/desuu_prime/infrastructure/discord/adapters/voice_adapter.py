"""Discord voice adapter implementing VoiceAdapter for connection management."""

from __future__ import annotations

import asyncio
import logging

import discord

from desuu_prime.application.interfaces.voice_adapter import VoiceAdapter
from desuu_prime.config.settings import VoiceSettings
from desuu_prime.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class DiscordVoiceAdapter(VoiceAdapter):
    """Connects, moves and disconnects the bot's voice client per guild."""

    def __init__(self, bot: discord.Client, settings: VoiceSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or VoiceSettings()

    def get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    def _get_voice_channel(
        self, guild_id: int, channel_id: int
    ) -> tuple[discord.Guild, discord.VoiceChannel | discord.StageChannel] | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            return None

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            return None
        return guild, channel

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        found = self._get_voice_channel(guild_id, channel_id)
        if found is None:
            return False
        guild, channel = found

        try:
            async with asyncio.timeout(self._settings.connect_timeout_seconds):
                await channel.connect(self_deaf=True)
            await self._ensure_self_deaf(guild, channel)
            logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False
        except Exception:
            logger.exception(LogTemplates.VOICE_CONNECT_FAILED, channel_id)
            return False

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)

    async def disconnect(self, guild_id: int) -> bool:
        vc = self.get_voice_client(guild_id)
        if not vc:
            logger.debug(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            return True

        try:
            await vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
            return True
        except Exception:
            logger.exception(LogTemplates.VOICE_DISCONNECT_FAILED, guild_id)
            return False

    async def ensure_connected(self, guild_id: int, channel_id: int) -> bool:
        """Connect if not connected, move if in a different channel."""
        vc = self.get_voice_client(guild_id)

        if vc and not vc.is_connected():
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            await self.disconnect(guild_id)
            vc = None

        if vc and vc.channel:
            if vc.channel.id == channel_id:
                return True
            return await self.move_to(guild_id, channel_id)

        return await self.connect(guild_id, channel_id)

    async def move_to(self, guild_id: int, channel_id: int) -> bool:
        vc = self.get_voice_client(guild_id)
        if not vc:
            return await self.connect(guild_id, channel_id)

        found = self._get_voice_channel(guild_id, channel_id)
        if found is None:
            return False
        guild, channel = found

        try:
            async with asyncio.timeout(self._settings.connect_timeout_seconds):
                await vc.move_to(channel)
            await self._ensure_self_deaf(guild, channel)
            logger.info(LogTemplates.VOICE_MOVED, channel.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_MOVE_TIMEOUT, channel_id)
            return False
        except Exception:
            logger.exception(LogTemplates.VOICE_MOVE_FAILED, channel_id)
            return False

    def is_connected(self, guild_id: int) -> bool:
        vc = self.get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    def get_current_channel_id(self, guild_id: int) -> int | None:
        vc = self.get_voice_client(guild_id)
        if vc and vc.channel:
            return vc.channel.id
        return None
