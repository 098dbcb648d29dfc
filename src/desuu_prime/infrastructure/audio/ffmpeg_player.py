"""
FFmpeg Audio Sources

Builds discord.py audio sources for playable items, with seeking and
frame-accurate position tracking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import discord

from desuu_prime.config.settings import AudioSettings
from desuu_prime.domain.shared.messages import ErrorMessages
from desuu_prime.domain.shared.types import FRAME_DURATION_MS

if TYPE_CHECKING:
    from ...domain.music.entities import PlayableItem

logger = logging.getLogger(__name__)

# These headers make ffmpeg appear as the Android client and avoid 403s on YouTube streams.
YOUTUBE_HEADERS = (
    '-user_agent "com.google.android.youtube/19.02.39 (Linux; U; Android 14)" '
    '-referer "https://www.youtube.com/" '
    '-headers "Accept-Language: en-US,en;q=0.9"'
)


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    # Reconnection settings for streaming
    reconnect: bool = True
    reconnect_streamed: bool = True
    reconnect_delay_max: int = 5

    # Audio processing
    disable_video: bool = True
    fade_in_seconds: float = 0.5

    # Volume (handled by PCMVolumeTransformer)
    default_volume: float = 0.5

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        return cls(
            reconnect_delay_max=settings.reconnect_delay_max,
            fade_in_seconds=settings.fade_in_seconds,
            default_volume=settings.default_volume,
        )

    def get_before_options(self, *, start_ms: int = 0, is_local: bool = False) -> str:
        """Input options: seek offset, plus reconnect flags and headers for remote streams."""
        opts = []
        if start_ms > 0:
            opts.append(f"-ss {start_ms / 1000:.3f}")
        if not is_local:
            if self.reconnect:
                opts.append("-reconnect 1")
            if self.reconnect_streamed:
                opts.append("-reconnect_streamed 1")
            if self.reconnect_delay_max:
                opts.append(f"-reconnect_delay_max {self.reconnect_delay_max}")
            opts.append(YOUTUBE_HEADERS)
        return " ".join(opts)

    def get_options(self) -> str:
        opts = []
        if self.disable_video:
            opts.append("-vn")
        if self.fade_in_seconds > 0:
            opts.append(f'-af "afade=t=in:ss=0:d={self.fade_in_seconds}"')
        return " ".join(opts)


class TrackingAudioSource(discord.PCMVolumeTransformer):
    """Volume-controlled source that advances the item position by one frame per read.

    ``read`` is called by the discord.py audio thread once per 20 ms frame,
    so the item's position is exact to the frame.
    """

    def __init__(self, original: discord.AudioSource, item: PlayableItem, volume: float = 1.0) -> None:
        super().__init__(original, volume=volume)
        self.item = item

    def read(self) -> bytes:
        data = super().read()
        if data:
            self.item.advance_position(FRAME_DURATION_MS)
        return data


class FFmpegPlayer:
    """Creates FFmpeg-backed sources for playable items."""

    def __init__(
        self, settings: AudioSettings | None = None, config: FFmpegConfig | None = None
    ) -> None:
        self._settings = settings or AudioSettings()
        self._config = config or FFmpegConfig.from_settings(self._settings)

    @property
    def config(self) -> FFmpegConfig:
        return self._config

    def create_source(self, item: PlayableItem, volume: float | None = None) -> TrackingAudioSource:
        """Create a position-tracking audio source starting at ``item.start_position_ms``.

        Raises:
            ValueError: If the item has no stream URL.
        """
        if not item.stream_url:
            raise ValueError(ErrorMessages.NO_STREAM_URL_FOR_ITEM.format(title=item.title))

        before_options = self._config.get_before_options(
            start_ms=item.start_position_ms if item.seekable else 0,
            is_local=item.is_local,
        )
        source = discord.FFmpegPCMAudio(
            item.stream_url,
            before_options=before_options,
            options=self._config.get_options(),
        )

        vol = volume if volume is not None else self._config.default_volume
        return TrackingAudioSource(source, item, volume=vol)
