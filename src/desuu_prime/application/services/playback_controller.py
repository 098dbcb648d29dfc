"""Playback Controller - the single authority over what plays in one guild."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from ...domain.music.entities import GuildSession, PlayableItem
from ...domain.music.value_objects import (
    EndReason,
    Idle,
    InterruptedFor,
    ItemLoaded,
    LoadFailed,
    LoadResult,
    NoMatches,
    PlaybackState,
    Playing,
    PlaylistLoaded,
)
from ...domain.shared.exceptions import BusinessRuleViolationError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...utils.logging import GuildLoggerAdapter
from .queue_models import LoadOutcome, LoadOutcomeKind, QueueInfo, SubmitKind, SubmitResult

if TYPE_CHECKING:
    from ..interfaces.audio_resolver import ItemResolver
    from ..interfaces.playback_backend import PlaybackBackend
    from .interrupt_manager import InterruptManager

logger = logging.getLogger(__name__)

OutcomeSink = Callable[[LoadOutcome], Any]


class PlaybackController:
    """Owns the queue-to-backend handoff for one guild.

    Every state transition happens under the session lock, and no critical
    section awaits. Advancement is driven only by end events from the
    backend: ``skip`` stops the backend and the resulting ``STOPPED`` event
    starts the next item, so a skip racing a natural end starts exactly one
    successor.
    """

    def __init__(self, session: GuildSession, resolver: ItemResolver) -> None:
        self._session = session
        self._resolver = resolver
        self._interrupts: InterruptManager | None = None
        self._log = GuildLoggerAdapter(logger, session.guild_id)
        session.backend.set_end_listener(self.on_item_end)

    def bind_interrupts(self, manager: InterruptManager) -> None:
        self._interrupts = manager

    # ── Read-only views ─────────────────────────────────────────────

    @property
    def guild_id(self) -> int:
        return self._session.guild_id

    @property
    def session(self) -> GuildSession:
        return self._session

    @property
    def backend(self) -> PlaybackBackend:
        return self._session.backend

    @property
    def log(self) -> GuildLoggerAdapter:
        return self._log

    @property
    def state(self) -> PlaybackState:
        with self._session.lock:
            return self._session.state

    @property
    def now_playing(self) -> PlayableItem | None:
        """The user-visible current item; a notification never counts."""
        state = self.state
        if isinstance(state, Playing):
            return state.item
        if isinstance(state, InterruptedFor) and state.resume.should_resume:
            return state.resume.item
        return None

    def upcoming(self) -> tuple[PlayableItem, ...]:
        with self._session.lock:
            return self._session.queue.snapshot()

    def queue_info(self) -> QueueInfo:
        with self._session.lock:
            return QueueInfo(
                current_item=self.now_playing,
                upcoming_items=list(self.upcoming()),
                interrupted=isinstance(self._session.state, InterruptedFor),
            )

    # ── Submission ──────────────────────────────────────────────────

    def submit(self, item: PlayableItem) -> SubmitResult:
        """Start ``item`` if idle, otherwise append it to the queue."""
        with self._session.lock:
            self._check_not_current(item)
            if isinstance(self._session.state, Idle) and not self._session.queue:
                return self._start_fresh(item, count=1)

            position = self._session.queue.enqueue(item)
            self._log.info(LogTemplates.QUEUE_ENQUEUED, item.title, position)
            if isinstance(self._session.state, Idle):
                # Items left behind by a lost connection play first.
                self.play_next_locked()
            return SubmitResult(kind=SubmitKind.QUEUED, item=item, position=position)

    def submit_all(self, items: Iterable[PlayableItem]) -> SubmitResult:
        """Playlist variant of ``submit``: the first item may start, the rest queue in order."""
        batch = list(items)
        if not batch:
            raise ValueError(ErrorMessages.EMPTY_PLAYLIST)

        with self._session.lock:
            for item in batch:
                self._check_not_current(item)
            first, rest = batch[0], batch[1:]

            if isinstance(self._session.state, Idle) and not self._session.queue:
                if rest:
                    start = self._session.queue.enqueue_all(rest)
                    self._log.info(LogTemplates.QUEUE_ENQUEUED_MANY, len(rest), start)
                return self._start_fresh(first, count=len(batch))

            start = self._session.queue.enqueue_all(batch)
            self._log.info(LogTemplates.QUEUE_ENQUEUED_MANY, len(batch), start)
            if isinstance(self._session.state, Idle):
                self.play_next_locked()
            return SubmitResult(
                kind=SubmitKind.QUEUED, item=first, position=start, count=len(batch)
            )

    def _start_fresh(self, item: PlayableItem, *, count: int) -> SubmitResult:
        self._session.state = Playing(item)
        if self.start_item(item):
            return SubmitResult(kind=SubmitKind.STARTED, item=item, count=count)
        # A failed start counts as the item ending with LOAD_FAILED.
        started = self.play_next_locked()
        return SubmitResult(
            kind=SubmitKind.START_FAILED, item=item, count=count, started_instead=started
        )

    def _check_not_current(self, item: PlayableItem) -> None:
        state = self._session.state
        current: tuple[PlayableItem | None, ...] = ()
        if isinstance(state, Playing):
            current = (state.item,)
        elif isinstance(state, InterruptedFor):
            current = (state.notification, state.resume.item)
        if item in current:
            raise BusinessRuleViolationError(
                "unique_queue_items",
                ErrorMessages.ITEM_ALREADY_QUEUED.format(title=item.title, item_id=item.id),
            )

    # ── User controls ───────────────────────────────────────────────

    def skip(self) -> PlayableItem | None:
        """Skip the user-visible item and return it, or ``None`` if nothing was skippable."""
        with self._session.lock:
            state = self._session.state
            if isinstance(state, Playing):
                self._log.info(LogTemplates.PLAYBACK_SKIP, state.item.title)
                self.stop_backend()
                return state.item
            if isinstance(state, InterruptedFor) and self._interrupts is not None:
                return self._interrupts.skip_locked()
            self._log.debug(LogTemplates.PLAYBACK_SKIP_IDLE)
            return None

    def pause(self) -> None:
        with self._session.lock:
            self._session.backend.set_paused(True)
            self._log.info(LogTemplates.PLAYBACK_PAUSED)

    def resume(self) -> None:
        with self._session.lock:
            self._session.backend.set_paused(False)
            self._log.info(LogTemplates.PLAYBACK_RESUMED)

    def shuffle(self) -> int:
        with self._session.lock:
            count = self._session.queue.shuffle()
            self._log.info(LogTemplates.QUEUE_SHUFFLED, count)
            return count

    def reset(self) -> int:
        """Stop playback, drop everything queued and go idle; returns the drained count."""
        with self._session.lock:
            epoch = self._session.bump_epoch()
            drained = self._session.queue.drain()
            was_idle = isinstance(self._session.state, Idle)
            self._session.state = Idle()
            if not was_idle:
                self.stop_backend()
            self._log.info(LogTemplates.PLAYBACK_RESET, epoch, len(drained))
            return len(drained)

    # ── Backend events ──────────────────────────────────────────────

    def on_item_end(self, ended: PlayableItem, reason: EndReason) -> None:
        """End-event listener registered with the backend."""
        with self._session.lock:
            state = self._session.state
            if isinstance(state, InterruptedFor) and self._interrupts is not None:
                self._interrupts.on_item_end_locked(ended, reason)
                return

            if not isinstance(state, Playing) or state.item != ended:
                self._log.debug(LogTemplates.END_EVENT_STALE, ended.title, reason)
                return

            self._log.info(LogTemplates.END_EVENT, ended.title, reason)
            if reason.may_start_next:
                self.play_next_locked()
            elif reason is EndReason.CLEANUP:
                self._session.state = Idle()
            else:
                self._log.debug(LogTemplates.END_EVENT_NO_ADVANCE, reason)

    # ── Primitives shared with the interrupt manager ────────────────

    def start_item(self, item: PlayableItem, *, takeover: bool = False) -> bool:
        """Ask the backend to start ``item``; any failure is reported as ``False``."""
        try:
            started = self._session.backend.start(item, takeover=takeover)
        except Exception:
            self._log.exception(LogTemplates.PLAYBACK_START_RAISED, item.title)
            return False
        if not started:
            self._log.warning(LogTemplates.PLAYBACK_START_REFUSED, item.title)
            return False
        self._log.info(LogTemplates.PLAYBACK_STARTED, item.title, takeover)
        return True

    def stop_backend(self) -> None:
        try:
            self._session.backend.stop()
        except Exception:
            self._log.exception(LogTemplates.PLAYBACK_STOP_RAISED)

    def play_next_locked(self) -> PlayableItem | None:
        """Pop and start queued items until one plays, else go idle.

        Caller must hold the session lock. While the backend has no voice
        connection the queue is left untouched.
        """
        backend = self._session.backend
        while backend.is_connected():
            item = self._session.queue.dequeue_next()
            if item is None:
                break
            self._session.state = Playing(item)
            if self.start_item(item):
                return item
        self._session.state = Idle()
        self._log.info(LogTemplates.PLAYBACK_IDLE)
        return None

    # ── Loading ─────────────────────────────────────────────────────

    async def load_and_play(
        self, identifier: str, *, sink: OutcomeSink | None = None
    ) -> LoadOutcome:
        """Resolve ``identifier`` and submit the result.

        The outcome is returned and also handed to ``sink`` when given. A
        resolution that finishes after a ``reset`` is dropped.
        """
        with self._session.lock:
            epoch = self._session.epoch

        try:
            result = await self._resolver.resolve(identifier)
        except Exception as exc:
            self._log.exception(LogTemplates.LOAD_RESOLVER_RAISED, identifier)
            result = LoadFailed(identifier=identifier, reason=str(exc))
        self._log.debug(LogTemplates.LOAD_RESOLVED, identifier, result.kind)

        with self._session.lock:
            if self._session.epoch != epoch:
                self._log.info(
                    LogTemplates.LOAD_DROPPED_STALE, identifier, epoch, self._session.epoch
                )
                outcome = LoadOutcome(kind=LoadOutcomeKind.DROPPED, identifier=identifier)
            else:
                outcome = self._apply_result(identifier, result)

        await self._emit(sink, outcome)
        return outcome

    def _apply_result(self, identifier: str, result: LoadResult) -> LoadOutcome:
        if isinstance(result, ItemLoaded):
            submitted = self.submit(result.item)
            kind = {
                SubmitKind.STARTED: LoadOutcomeKind.STARTED,
                SubmitKind.QUEUED: LoadOutcomeKind.QUEUED,
                SubmitKind.START_FAILED: LoadOutcomeKind.START_FAILED,
            }[submitted.kind]
            return LoadOutcome(
                kind=kind,
                identifier=identifier,
                item=submitted.item,
                position=submitted.position,
                count=1,
            )

        if isinstance(result, PlaylistLoaded):
            submitted = self.submit_all(result.items)
            kind = {
                SubmitKind.STARTED: LoadOutcomeKind.PLAYLIST_STARTED,
                SubmitKind.QUEUED: LoadOutcomeKind.PLAYLIST_QUEUED,
                SubmitKind.START_FAILED: LoadOutcomeKind.START_FAILED,
            }[submitted.kind]
            return LoadOutcome(
                kind=kind,
                identifier=identifier,
                item=submitted.item,
                position=submitted.position,
                count=submitted.count,
                playlist_name=result.name,
            )

        if isinstance(result, NoMatches):
            return LoadOutcome(kind=LoadOutcomeKind.NO_MATCHES, identifier=identifier)

        return LoadOutcome(
            kind=LoadOutcomeKind.LOAD_FAILED, identifier=identifier, reason=result.reason
        )

    async def _emit(self, sink: OutcomeSink | None, outcome: LoadOutcome) -> None:
        if sink is None:
            return
        try:
            ret = sink(outcome)
            if inspect.isawaitable(ret):
                await ret
        except Exception:
            self._log.exception(LogTemplates.LOAD_SINK_FAILED, outcome.identifier)
