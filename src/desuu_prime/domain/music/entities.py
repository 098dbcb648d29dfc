"""Core domain entities for the music bounded context."""

from __future__ import annotations

import random
import threading
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from desuu_prime.domain.music.value_objects import Idle, PlaybackState
from desuu_prime.domain.shared.exceptions import BusinessRuleViolationError, ValidationError
from desuu_prime.domain.shared.messages import ErrorMessages
from desuu_prime.domain.shared.types import (
    DiscordSnowflake,
    NonEmptyStr,
    PositionMs,
    TrackTitleStr,
)

if TYPE_CHECKING:
    from desuu_prime.application.interfaces.playback_backend import PlaybackBackend


def _new_item_id() -> str:
    return uuid4().hex


class PlayableItem(BaseModel):
    """A resolved unit of audio the backend can start.

    Metadata is frozen; only the playback position moves, advanced by the
    backend as frames are sent. Identity is the ``id`` field, which is fresh
    for every resolution and every clone.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr = Field(default_factory=_new_item_id)
    source_id: NonEmptyStr
    title: TrackTitleStr
    stream_url: NonEmptyStr
    webpage_url: NonEmptyStr | None = None
    duration_ms: PositionMs | None = None
    is_local: bool = False
    seekable: bool = True
    start_position_ms: PositionMs = 0

    _position_ms: int = PrivateAttr(default=0)

    def model_post_init(self, __context: Any) -> None:
        self._position_ms = self.start_position_ms

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlayableItem):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def position_ms(self) -> int:
        return self._position_ms

    def advance_position(self, delta_ms: int) -> int:
        """Add ``delta_ms`` to the playback position and return the new value."""
        self._position_ms += delta_ms
        return self._position_ms

    def clone(self) -> PlayableItem:
        """Return an independent copy rewound to the beginning."""
        return self._copy_at(0)

    def clone_at(self, position_ms: int) -> PlayableItem:
        """Return an independent copy that starts at ``position_ms``.

        Streams that cannot seek restart from the beginning.
        """
        if position_ms < 0:
            raise ValidationError(
                ErrorMessages.NEGATIVE_POSITION.format(position=position_ms), field="position_ms"
            )
        if not self.seekable:
            position_ms = 0
        elif self.duration_ms is not None:
            position_ms = min(position_ms, self.duration_ms)
        return self._copy_at(position_ms)

    def _copy_at(self, position_ms: int) -> PlayableItem:
        copy = self.model_copy(update={"id": _new_item_id(), "start_position_ms": position_ms})
        copy._position_ms = position_ms
        return copy

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        if self.duration_ms is None:
            return "Live" if not self.seekable else "Unknown"
        return format_ms(self.duration_ms)

    @property
    def display_title(self) -> str:
        if self.duration_ms:
            return f"{self.title} [{self.duration_formatted}]"
        return self.title


def format_ms(ms: int) -> str:
    hours, remainder = divmod(ms // 1000, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


class TrackQueue:
    """FIFO of pending items for one guild, guarded by its own lock.

    No item identity appears twice and every item leaves exactly once,
    either through ``dequeue_next`` or ``drain``. Operations never block
    beyond the lock itself and never hand out a live view.
    """

    def __init__(self, items: Iterable[PlayableItem] = ()) -> None:
        self._lock = threading.Lock()
        self._items: deque[PlayableItem] = deque()
        self._ids: set[str] = set()
        self.enqueue_all(items)

    def enqueue(self, item: PlayableItem) -> int:
        """Append ``item`` and return its zero-based position."""
        with self._lock:
            self._check_absent(item)
            self._items.append(item)
            self._ids.add(item.id)
            return len(self._items) - 1

    def enqueue_all(self, items: Iterable[PlayableItem]) -> int:
        """Append ``items`` contiguously and return the position of the first one."""
        batch = list(items)
        with self._lock:
            seen: set[str] = set()
            for item in batch:
                self._check_absent(item)
                if item.id in seen:
                    raise BusinessRuleViolationError(
                        "unique_queue_items",
                        ErrorMessages.ITEM_ALREADY_QUEUED.format(title=item.title, item_id=item.id),
                    )
                seen.add(item.id)
            start = len(self._items)
            self._items.extend(batch)
            self._ids.update(seen)
            return start

    def dequeue_next(self) -> PlayableItem | None:
        with self._lock:
            if not self._items:
                return None
            item = self._items.popleft()
            self._ids.discard(item.id)
            return item

    def shuffle(self, rng: random.Random | None = None) -> int:
        """Permute the pending items uniformly at random; returns how many were shuffled."""
        shuffle = rng.shuffle if rng is not None else random.shuffle
        with self._lock:
            items = list(self._items)
            shuffle(items)
            self._items = deque(items)
            return len(items)

    def drain(self) -> list[PlayableItem]:
        with self._lock:
            items = list(self._items)
            self._items.clear()
            self._ids.clear()
            return items

    def snapshot(self) -> tuple[PlayableItem, ...]:
        with self._lock:
            return tuple(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, PlayableItem):
            return False
        with self._lock:
            return item.id in self._ids

    def _check_absent(self, item: PlayableItem) -> None:
        if item.id in self._ids:
            raise BusinessRuleViolationError(
                "unique_queue_items",
                ErrorMessages.ITEM_ALREADY_QUEUED.format(title=item.title, item_id=item.id),
            )


@dataclass
class GuildSession:
    """Per-guild aggregate: backend handle, queue, state and the guild's lock.

    ``lock`` is the single mutual-exclusion domain for every state
    transition of this guild. ``epoch`` is bumped on reset so resolutions
    that started earlier can be recognised as stale.
    """

    guild_id: DiscordSnowflake
    backend: PlaybackBackend
    queue: TrackQueue = field(default_factory=TrackQueue)
    state: PlaybackState = field(default_factory=Idle)
    lock: threading.RLock = field(default_factory=threading.RLock)
    epoch: int = 0

    def bump_epoch(self) -> int:
        self.epoch += 1
        return self.epoch
