"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from desuu_prime.domain.music.entities import PlayableItem


class EndReason(Enum):
    """Why a playable item stopped playing."""

    FINISHED = "finished"
    LOAD_FAILED = "load_failed"
    STOPPED = "stopped"
    REPLACED = "replaced"
    CLEANUP = "cleanup"

    @property
    def may_start_next(self) -> bool:
        """Whether the controller should pop the next queued item."""
        return self in (EndReason.FINISHED, EndReason.LOAD_FAILED, EndReason.STOPPED)

    def __str__(self) -> str:
        return self.value


# ── Playback state variants ─────────────────────────────────────────


@dataclass(frozen=True)
class ResumeTarget:
    """What an interrupt will restore once the notification ends.

    ``item is None`` means nothing was playing when the interrupt began.
    ``paused`` records a user pause that the resumed copy must keep.
    """

    item: PlayableItem | None = None
    position_ms: int = 0
    skipped: bool = False
    paused: bool = False

    @property
    def is_empty(self) -> bool:
        return self.item is None

    @property
    def should_resume(self) -> bool:
        return self.item is not None and not self.skipped

    def mark_skipped(self) -> ResumeTarget:
        return replace(self, skipped=True)

    def at(self, position_ms: int) -> ResumeTarget:
        return replace(self, position_ms=position_ms)

    def cleared(self) -> ResumeTarget:
        return ResumeTarget()


@dataclass(frozen=True)
class Idle:
    """Nothing is playing and no interrupt is pending."""

    name = "idle"


@dataclass(frozen=True)
class Playing:
    """A queued item owns the backend."""

    item: PlayableItem
    name = "playing"


@dataclass(frozen=True)
class InterruptedFor:
    """A notification is resolving (``notification is None``) or playing."""

    notification: PlayableItem | None
    resume: ResumeTarget = field(default_factory=ResumeTarget)
    name = "interrupted"

    @property
    def is_pending(self) -> bool:
        return self.notification is None


PlaybackState: TypeAlias = Idle | Playing | InterruptedFor


# ── Resolver results ────────────────────────────────────────────────


@dataclass(frozen=True)
class ItemLoaded:
    item: PlayableItem
    kind = "item"


@dataclass(frozen=True)
class PlaylistLoaded:
    """An ordered, non-empty list of items resolved from one playlist."""

    items: tuple[PlayableItem, ...]
    name: str = "Playlist"
    kind = "playlist"

    @property
    def first(self) -> PlayableItem:
        return self.items[0]


@dataclass(frozen=True)
class NoMatches:
    identifier: str
    kind = "no_matches"


@dataclass(frozen=True)
class LoadFailed:
    identifier: str
    reason: str
    kind = "load_failed"


LoadResult: TypeAlias = ItemLoaded | PlaylistLoaded | NoMatches | LoadFailed
