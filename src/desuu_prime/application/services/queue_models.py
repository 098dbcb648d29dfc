"""DTOs for the playback controller."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from ...domain.music.entities import PlayableItem
from ...domain.shared.types import NonNegativeInt


class SubmitKind(Enum):
    STARTED = "started"
    QUEUED = "queued"
    START_FAILED = "start_failed"


class SubmitResult(BaseModel):
    """What happened to a submitted item (or the first item of a batch)."""

    kind: SubmitKind
    item: PlayableItem
    position: NonNegativeInt | None = None
    count: NonNegativeInt = 1
    # Set when a failed start fell through to the next queued item.
    started_instead: PlayableItem | None = None

    @property
    def started(self) -> bool:
        return self.kind is SubmitKind.STARTED


class LoadOutcomeKind(Enum):
    STARTED = "started"
    QUEUED = "queued"
    PLAYLIST_STARTED = "playlist_started"
    PLAYLIST_QUEUED = "playlist_queued"
    START_FAILED = "start_failed"
    NO_MATCHES = "no_matches"
    LOAD_FAILED = "load_failed"
    DROPPED = "dropped"


class LoadOutcome(BaseModel):
    """Result of ``load_and_play`` reported back to the requester."""

    kind: LoadOutcomeKind
    identifier: str
    item: PlayableItem | None = None
    position: NonNegativeInt | None = None
    count: NonNegativeInt = 0
    playlist_name: str | None = None
    reason: str | None = None

    @property
    def success(self) -> bool:
        return self.kind in (
            LoadOutcomeKind.STARTED,
            LoadOutcomeKind.QUEUED,
            LoadOutcomeKind.PLAYLIST_STARTED,
            LoadOutcomeKind.PLAYLIST_QUEUED,
        )


class QueueInfo(BaseModel):
    """Read-only view of one guild's playback for the /queue and /nowplaying commands."""

    current_item: PlayableItem | None
    upcoming_items: list[PlayableItem]
    interrupted: bool = False

    @property
    def total_length(self) -> int:
        return len(self.upcoming_items)

    @property
    def total_duration_ms(self) -> int | None:
        durations = [i.duration_ms for i in self.upcoming_items]
        if not durations or any(d is None for d in durations):
            return None
        return sum(d for d in durations if d is not None)
