"""Port interface for Discord voice operations."""

from __future__ import annotations

from abc import ABC, abstractmethod

from desuu_prime.domain.shared.types import ChannelIdField, DiscordSnowflake


class VoiceAdapter(ABC):
    """Interface for Discord voice channel operations."""

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> bool:
        """Connect to a voice channel."""
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Disconnect from voice in a guild."""
        ...

    @abstractmethod
    async def ensure_connected(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> bool:
        """Ensure bot is connected to the specified channel, connecting or moving as needed."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def get_current_channel_id(self, guild_id: DiscordSnowflake) -> ChannelIdField | None:
        """Get the current voice channel ID, or None if not connected."""
        ...
