"""Interrupt Manager - plays a short notification over the current item and resumes it."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from ...domain.music.entities import PlayableItem
from ...domain.music.value_objects import (
    EndReason,
    Idle,
    InterruptedFor,
    ItemLoaded,
    LoadFailed,
    Playing,
    ResumeTarget,
)
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.audio_resolver import ItemResolver
    from .playback_controller import PlaybackController

logger = logging.getLogger(__name__)


class InterruptManager:
    """Injects notification playback without losing the queue position.

    Shares the controller's session lock. While an interrupt is pending or
    playing the session state is ``InterruptedFor`` and all end events are
    routed here by the controller.
    """

    def __init__(self, controller: PlaybackController, resolver: ItemResolver) -> None:
        self._controller = controller
        self._session = controller.session
        self._resolver = resolver
        self._log = controller.log
        controller.bind_interrupts(self)

    @property
    def is_active(self) -> bool:
        with self._session.lock:
            return isinstance(self._session.state, InterruptedFor)

    async def notify(self, notification_source_id: str) -> bool:
        """Play ``notification_source_id`` over whatever is playing, then resume it.

        Returns ``True`` if the notification took over playback. A second
        call while one is pending or playing is a no-op.
        """
        with self._session.lock:
            state = self._session.state
            if isinstance(state, InterruptedFor):
                self._log.debug(LogTemplates.INTERRUPT_BUSY, notification_source_id)
                return False
            if not self._session.backend.is_connected():
                self._log.debug(LogTemplates.INTERRUPT_NOT_CONNECTED, notification_source_id)
                return False

            if isinstance(state, Playing):
                target = ResumeTarget(
                    item=state.item,
                    position_ms=state.item.position_ms,
                    paused=self._session.backend.is_paused(),
                )
                self._log.info(LogTemplates.INTERRUPT_CAPTURED, state.item.title, target.position_ms)
            else:
                target = ResumeTarget()
                self._log.debug(LogTemplates.INTERRUPT_CAPTURED_IDLE)
            self._session.state = InterruptedFor(notification=None, resume=target)
            epoch = self._session.epoch

        try:
            result = await self._resolver.resolve(notification_source_id)
        except Exception as exc:
            self._log.exception(LogTemplates.LOAD_RESOLVER_RAISED, notification_source_id)
            result = LoadFailed(identifier=notification_source_id, reason=str(exc))

        with self._session.lock:
            state = self._session.state
            if (
                self._session.epoch != epoch
                or not isinstance(state, InterruptedFor)
                or not state.is_pending
            ):
                self._log.info(LogTemplates.INTERRUPT_STALE, notification_source_id)
                return False

            if not isinstance(result, ItemLoaded):
                self._log.warning(LogTemplates.INTERRUPT_ABORTED, notification_source_id, result.kind)
                self._abort_locked(state.resume)
                return False

            notification = result.item
            resume = state.resume
            if resume.item is not None:
                resume = replace(
                    resume.at(resume.item.position_ms),
                    paused=self._session.backend.is_paused(),
                )
            self._session.state = InterruptedFor(notification=notification, resume=resume)

            if self._controller.start_item(notification, takeover=True):
                self._log.info(LogTemplates.INTERRUPT_NOTIFICATION_STARTED, notification.title)
                return True

            self._log.warning(LogTemplates.INTERRUPT_NOTIFICATION_FAILED, notification.title)
            self._finish_locked(resume)
            return False

    def skip_locked(self) -> PlayableItem | None:
        """Mark the resume target skipped; the notification keeps playing.

        Caller must hold the session lock and the state must be ``InterruptedFor``.
        """
        state = self._session.state
        assert isinstance(state, InterruptedFor)
        if not state.resume.should_resume:
            return None
        item = state.resume.item
        self._session.state = replace(state, resume=state.resume.mark_skipped())
        self._log.info(LogTemplates.INTERRUPT_SKIP, item.title if item else None)
        return item

    def on_item_end_locked(self, ended: PlayableItem, reason: EndReason) -> None:
        """Handle an end event while interrupted. Caller must hold the session lock."""
        state = self._session.state
        assert isinstance(state, InterruptedFor)

        if state.notification is not None and ended == state.notification:
            self._log.info(LogTemplates.END_EVENT, ended.title, reason)
            self._finish_locked(state.resume)
            return

        if state.resume.item is not None and ended == state.resume.item:
            if reason is EndReason.REPLACED:
                # The notification's takeover; the position was already captured.
                return
            self._log.info(LogTemplates.INTERRUPT_TARGET_CLEARED, ended.title, reason)
            self._session.state = replace(state, resume=state.resume.cleared())
            return

        self._log.debug(LogTemplates.END_EVENT_STALE, ended.title, reason)

    def _finish_locked(self, target: ResumeTarget) -> None:
        """The notification is over: resume the captured item or advance normally.

        A captured user pause is re-applied to the resumed copy.
        """
        if target.should_resume and target.item is not None:
            resumed = target.item.clone_at(target.position_ms)
            self._session.state = Playing(resumed)
            self._log.info(LogTemplates.INTERRUPT_RESUMING, resumed.title, target.position_ms)
            if self._controller.start_item(resumed, takeover=True):
                if target.paused:
                    self._session.backend.set_paused(True)
                    self._log.info(LogTemplates.INTERRUPT_REPAUSED, resumed.title)
                return
            self._log.warning(LogTemplates.INTERRUPT_RESUME_DROPPED, resumed.title, target.position_ms)
        self._controller.play_next_locked()

    def _abort_locked(self, target: ResumeTarget) -> None:
        """Undo a pending interrupt without touching the backend unless a skip was deferred."""
        if target.item is not None:
            self._session.state = Playing(target.item)
            if target.skipped:
                self._controller.stop_backend()
            return
        self._session.state = Idle()
        if self._session.queue:
            self._controller.play_next_locked()
