"""Guild Session Registry - maps guild ids to their playback controllers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from ...domain.music.entities import GuildSession
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake
from ..interfaces.audio_resolver import ItemResolver
from ..interfaces.playback_backend import PlaybackBackend
from .interrupt_manager import InterruptManager
from .playback_controller import PlaybackController

logger = logging.getLogger(__name__)

BackendFactory = Callable[[DiscordSnowflake], PlaybackBackend]


@dataclass(frozen=True)
class GuildPlayback:
    """Everything wired for one guild."""

    session: GuildSession
    controller: PlaybackController
    interrupts: InterruptManager


class GuildSessionRegistry:
    """Lazily creates one controller per guild and never destroys it.

    Only ``get_or_create`` takes the registry lock; per-guild work runs under
    each session's own lock.
    """

    def __init__(self, *, resolver: ItemResolver, backend_factory: BackendFactory) -> None:
        self._resolver = resolver
        self._backend_factory = backend_factory
        self._lock = threading.Lock()
        self._entries: dict[int, GuildPlayback] = {}

    def get_or_create(self, guild_id: DiscordSnowflake) -> GuildPlayback:
        with self._lock:
            entry = self._entries.get(guild_id)
            if entry is None:
                entry = self._build(guild_id)
                self._entries[guild_id] = entry
                logger.info(LogTemplates.SESSION_CREATED, guild_id)
            return entry

    def controller_for(self, guild_id: DiscordSnowflake) -> PlaybackController:
        return self.get_or_create(guild_id).controller

    def interrupts_for(self, guild_id: DiscordSnowflake) -> InterruptManager:
        return self.get_or_create(guild_id).interrupts

    def get(self, guild_id: DiscordSnowflake) -> GuildPlayback | None:
        with self._lock:
            return self._entries.get(guild_id)

    def guild_ids(self) -> list[int]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, guild_id: object) -> bool:
        with self._lock:
            return guild_id in self._entries

    def _build(self, guild_id: DiscordSnowflake) -> GuildPlayback:
        session = GuildSession(guild_id=guild_id, backend=self._backend_factory(guild_id))
        controller = PlaybackController(session, self._resolver)
        interrupts = InterruptManager(controller, self._resolver)
        return GuildPlayback(session=session, controller=controller, interrupts=interrupts)
