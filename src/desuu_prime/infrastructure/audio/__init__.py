"""Audio infrastructure - yt-dlp resolver and FFmpeg sources."""

from desuu_prime.infrastructure.audio.ffmpeg_player import (
    FFmpegConfig,
    FFmpegPlayer,
    TrackingAudioSource,
)
from desuu_prime.infrastructure.audio.models import (
    AudioFormatInfo,
    CacheEntry,
    ExtractorArgs,
    YouTubeExtractorConfig,
    YtDlpEntryInfo,
    YtDlpOpts,
    YtDlpPlaylistInfo,
)
from desuu_prime.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "ExtractorArgs",
    "FFmpegConfig",
    "FFmpegPlayer",
    "TrackingAudioSource",
    "YtDlpEntryInfo",
    "YtDlpOpts",
    "YtDlpPlaylistInfo",
    "YtDlpResolver",
    "YouTubeExtractorConfig",
]
