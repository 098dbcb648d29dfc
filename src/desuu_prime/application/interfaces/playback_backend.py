"""Port interface for the per-guild audio output."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import PlayableItem
    from ...domain.music.value_objects import EndReason

EndListener = Callable[["PlayableItem", "EndReason"], None]


class PlaybackBackend(ABC):
    """One guild's audio output, exclusively owned by its session.

    Every started item eventually produces exactly one ``(item, reason)``
    end event through the listener. Events are delivered asynchronously:
    never from inside ``start`` or ``stop``.
    """

    @abstractmethod
    def start(self, item: "PlayableItem", *, takeover: bool = False) -> bool:
        """Begin playing ``item`` from its start position.

        With ``takeover`` the currently playing item is replaced and ends
        with ``REPLACED``. Returns ``False`` if playback could not begin.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop the current item; its end event carries ``STOPPED``."""
        ...

    @abstractmethod
    def set_paused(self, paused: bool) -> None:
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def is_paused(self) -> bool:
        """Whether the current item is held by ``set_paused(True)``."""
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    def set_end_listener(self, listener: EndListener | None) -> None:
        """Register the callback that receives end events."""
        ...
