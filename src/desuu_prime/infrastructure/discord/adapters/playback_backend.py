"""PlaybackBackend implementation on top of a discord.py VoiceClient."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

import discord

from desuu_prime.application.interfaces.playback_backend import EndListener, PlaybackBackend
from desuu_prime.domain.music.value_objects import EndReason
from desuu_prime.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ....domain.music.entities import PlayableItem
    from ...audio.ffmpeg_player import FFmpegPlayer, TrackingAudioSource
    from .voice_adapter import DiscordVoiceAdapter

logger = logging.getLogger(__name__)


@dataclass
class _ActivePlayback:
    item: PlayableItem
    source: TrackingAudioSource
    end_reason: EndReason | None = None


class DiscordPlaybackBackend(PlaybackBackend):
    """One guild's audio output.

    discord.py calls the ``after`` hook on its audio thread; the end event
    is hopped onto the event loop with ``call_soon_threadsafe`` so listeners
    always run on the loop and never inside ``start`` or ``stop``.
    """

    def __init__(
        self,
        guild_id: int,
        *,
        voice: DiscordVoiceAdapter,
        player: FFmpegPlayer,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._guild_id = guild_id
        self._voice = voice
        self._player = player
        self._loop = loop
        self._lock = threading.Lock()
        self._active: _ActivePlayback | None = None
        self._listener: EndListener | None = None

    def set_end_listener(self, listener: EndListener | None) -> None:
        self._listener = listener

    def start(self, item: PlayableItem, *, takeover: bool = False) -> bool:
        vc = self._voice.get_voice_client(self._guild_id)
        if vc is None or not vc.is_connected():
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, self._guild_id)
            return False

        try:
            source = self._player.create_source(item)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_START_RAISED, item.title)
            return False

        with self._lock:
            previous = self._active
            if previous is not None and previous.end_reason is None:
                previous.end_reason = EndReason.REPLACED
            playback = _ActivePlayback(item=item, source=source)
            self._active = playback

        if vc.is_playing() or vc.is_paused():
            vc.stop()

        try:
            vc.play(source, after=lambda error: self._on_after(playback, error))
            return True
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_START_RAISED, item.title)

        with self._lock:
            if self._active is playback:
                self._active = None
        source.cleanup()
        return False

    def stop(self) -> None:
        with self._lock:
            playback = self._active
            if playback is None:
                return
            if playback.end_reason is None:
                playback.end_reason = EndReason.STOPPED

        vc = self._voice.get_voice_client(self._guild_id)
        if vc is not None and (vc.is_playing() or vc.is_paused()):
            vc.stop()

    def set_paused(self, paused: bool) -> None:
        vc = self._voice.get_voice_client(self._guild_id)
        if vc is None:
            return
        if paused and vc.is_playing():
            vc.pause()
        elif not paused and vc.is_paused():
            vc.resume()

    def is_playing(self) -> bool:
        with self._lock:
            if self._active is None:
                return False
        vc = self._voice.get_voice_client(self._guild_id)
        return vc is not None and (vc.is_playing() or vc.is_paused())

    def is_paused(self) -> bool:
        with self._lock:
            if self._active is None:
                return False
        vc = self._voice.get_voice_client(self._guild_id)
        return vc is not None and vc.is_paused()

    def is_connected(self) -> bool:
        return self._voice.is_connected(self._guild_id)

    @property
    def current_item(self) -> PlayableItem | None:
        with self._lock:
            return self._active.item if self._active is not None else None

    # ── Audio thread ────────────────────────────────────────────────

    def _on_after(self, playback: _ActivePlayback, error: Exception | None) -> None:
        with self._lock:
            if self._active is playback:
                self._active = None
            reason = playback.end_reason

        if reason is None:
            if error is not None:
                logger.warning(
                    LogTemplates.BACKEND_PLAYER_ERROR, playback.item.title, self._guild_id, error
                )
                reason = EndReason.LOAD_FAILED
            elif not self.is_connected():
                reason = EndReason.CLEANUP
            else:
                reason = EndReason.FINISHED

        try:
            self._loop.call_soon_threadsafe(self._dispatch, playback.item, reason)
        except RuntimeError:
            # Loop already closed during shutdown.
            logger.debug(LogTemplates.BACKEND_LISTENER_MISSING, self._guild_id)

    def _dispatch(self, item: PlayableItem, reason: EndReason) -> None:
        listener = self._listener
        if listener is None:
            logger.warning(LogTemplates.BACKEND_LISTENER_MISSING, self._guild_id)
            return
        try:
            listener(item, reason)
        except Exception:
            logger.exception(LogTemplates.BACKEND_LISTENER_RAISED, self._guild_id)
