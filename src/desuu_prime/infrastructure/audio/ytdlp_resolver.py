"""ItemResolver implementation using yt-dlp for URLs, searches, playlists and local files."""

from __future__ import annotations

import asyncio
import logging
import re
import threading
import time
from pathlib import Path
from typing import Any, Final, cast
from urllib.parse import unquote, urlparse

from yt_dlp import YoutubeDL

from desuu_prime.application.interfaces.audio_resolver import ItemResolver
from desuu_prime.config.settings import AudioSettings
from desuu_prime.domain.music.entities import PlayableItem
from desuu_prime.domain.music.value_objects import (
    ItemLoaded,
    LoadFailed,
    LoadResult,
    NoMatches,
    PlaylistLoaded,
)
from desuu_prime.domain.shared.exceptions import ResolutionError
from desuu_prime.domain.shared.messages import ErrorMessages, LogTemplates
from desuu_prime.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    AudioFormatInfo,
    CacheEntry,
    ExtractorArgs,
    YouTubeExtractorConfig,
    YtDlpEntryInfo,
    YtDlpOpts,
    YtDlpPlaylistInfo,
)

logger = logging.getLogger(__name__)

URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(https?://|www\.)", re.IGNORECASE)

PLAYLIST_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"[?&]list="),
    re.compile(r"/playlist\?"),
    re.compile(r"/sets/"),
    re.compile(r"/album/"),
]


class YtDlpResolver(ItemResolver):
    """Resolves identifiers in this order: local file, playlist URL, single URL, search.

    Extraction runs in a worker thread. Single-item extractions are cached
    per URL for ``CACHE_TTL`` seconds, bounded to ``CACHE_MAX_SIZE`` entries.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._cache: dict[str, CacheEntry] = {}
        self._cache_lock = threading.Lock()

        extractor_args = None
        if self._settings.pot_server_url:
            extractor_args = ExtractorArgs(
                youtube=YouTubeExtractorConfig(pot_server_url=self._settings.pot_server_url)
            )
            logger.info(LogTemplates.YTDLP_POT_CONFIGURED, self._settings.pot_server_url)

        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            extractor_args=extractor_args,
        )

    async def resolve(self, identifier: str) -> LoadResult:
        identifier = identifier.strip()
        if not identifier:
            return LoadFailed(identifier=identifier, reason=ErrorMessages.EMPTY_IDENTIFIER)

        try:
            local = self._local_path(identifier)
            if local is not None:
                return ItemLoaded(item=self._local_item(local))
            if self.is_url(identifier) and self.is_playlist(identifier):
                return await self._resolve_playlist(identifier)
            if self.is_url(identifier):
                info = await asyncio.to_thread(self._extract_info_sync, identifier)
            else:
                info = await asyncio.to_thread(self._search_sync, identifier)
        except ResolutionError as e:
            return LoadFailed(identifier=identifier, reason=e.reason)

        if info is None:
            return NoMatches(identifier=identifier)
        item = self._info_to_item(info, identifier)
        if item is None:
            return NoMatches(identifier=identifier)
        return ItemLoaded(item=item)

    # ── Classification ──────────────────────────────────────────────

    @staticmethod
    def is_url(identifier: str) -> bool:
        return URL_PATTERN.search(identifier) is not None

    @staticmethod
    def is_playlist(url: str) -> bool:
        return any(pattern.search(url) for pattern in PLAYLIST_PATTERNS)

    @staticmethod
    def _local_path(identifier: str) -> Path | None:
        """Return the path for ``file://`` URIs and existing files, else None."""
        if identifier.lower().startswith("file://"):
            path = Path(unquote(urlparse(identifier).path))
            if not path.is_file():
                raise ResolutionError(identifier, ErrorMessages.FILE_NOT_FOUND.format(path=path))
            return path
        if URL_PATTERN.search(identifier):
            return None
        path = Path(identifier).expanduser()
        try:
            return path if path.is_file() else None
        except OSError:
            return None

    # ── Conversion ──────────────────────────────────────────────────

    @staticmethod
    def _local_item(path: Path) -> PlayableItem:
        resolved = path.resolve()
        return PlayableItem(
            source_id=str(resolved),
            title=resolved.stem or resolved.name,
            stream_url=str(resolved),
            is_local=True,
        )

    def _info_to_item(self, info: YtDlpEntryInfo, identifier: str) -> PlayableItem | None:
        stream_url = self._extract_stream_url(info)
        if not stream_url:
            logger.warning(ErrorMessages.NO_STREAM_URL_FOR_ITEM.format(title=info.title))
            return None
        page_url = info.webpage_url or info.original_url
        return PlayableItem(
            source_id=page_url or identifier,
            title=info.title,
            stream_url=stream_url,
            webpage_url=page_url,
            duration_ms=info.duration_ms,
            seekable=not info.is_live,
        )

    def _extract_stream_url(self, info: YtDlpEntryInfo) -> str | None:
        if info.url:
            return info.url
        return self._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    def _get_opts(self, **overrides: Any) -> dict[str, Any]:
        opts = self._base_opts.model_copy(update=overrides) if overrides else self._base_opts
        return opts.model_dump(exclude_none=True)

    # ── Blocking extraction (worker thread) ─────────────────────────

    def _extract_info_sync(self, url: str) -> YtDlpEntryInfo | None:
        now = time.time()
        with self._cache_lock:
            cached = self._cache.get(url)
            if cached is not None:
                if now - cached.cached_at < CACHE_TTL:
                    logger.debug(LogTemplates.CACHE_HIT, url[:LOG_URL_TRUNCATE])
                    return cached.info
                self._cache.pop(url, None)

        try:
            with YoutubeDL(params=cast(Any, self._get_opts())) as ydl:
                data = ydl.extract_info(url, download=False)
        except Exception as e:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url[:LOG_URL_TRUNCATE])
            raise ResolutionError(url, str(e)) from e

        info = YtDlpEntryInfo.model_validate(dict(data)) if isinstance(data, dict) else None
        self._store(url, info, now)
        return info

    def _search_sync(self, query: str) -> YtDlpEntryInfo | None:
        search_query = f"{self._settings.search_prefix}1:{query}"
        try:
            with YoutubeDL(params=cast(Any, self._get_opts())) as ydl:
                data = ydl.extract_info(search_query, download=False)
        except Exception as e:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            raise ResolutionError(query, str(e)) from e

        if not isinstance(data, dict):
            return None
        entries = [e for e in data.get("entries") or [] if isinstance(e, dict)]
        if not entries:
            return None
        return YtDlpEntryInfo.model_validate(entries[0])

    def _extract_playlist_sync(self, url: str) -> YtDlpPlaylistInfo:
        try:
            opts = self._get_opts(noplaylist=False, extract_flat="in_playlist")
            with YoutubeDL(params=cast(Any, opts)) as ydl:
                data = ydl.extract_info(url, download=False)
        except Exception as e:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_PLAYLIST, url[:LOG_URL_TRUNCATE])
            raise ResolutionError(url, str(e)) from e

        if not isinstance(data, dict):
            return YtDlpPlaylistInfo()
        return YtDlpPlaylistInfo.model_validate(data)

    async def _resolve_playlist(self, url: str) -> LoadResult:
        playlist = await asyncio.to_thread(self._extract_playlist_sync, url)

        # Flat extraction returns metadata only, so resolve each entry individually.
        items: list[PlayableItem] = []
        for entry in playlist.entries:
            entry_url = entry.webpage_url or entry.url
            if not entry_url:
                continue
            try:
                info = await asyncio.to_thread(self._extract_info_sync, entry_url)
            except ResolutionError:
                logger.warning(LogTemplates.YTDLP_SKIPPED_ENTRY, entry_url[:LOG_URL_TRUNCATE])
                continue
            item = self._info_to_item(info, entry_url) if info is not None else None
            if item is not None:
                items.append(item)

        if not items:
            return NoMatches(identifier=url)
        return PlaylistLoaded(items=tuple(items), name=playlist.title)

    # ── Cache ───────────────────────────────────────────────────────

    def _store(self, url: str, info: YtDlpEntryInfo | None, now: float) -> None:
        with self._cache_lock:
            self._cache[url] = CacheEntry(info=info, cached_at=now)
            if len(self._cache) <= CACHE_MAX_SIZE:
                return
            expired = [k for k, e in self._cache.items() if now - e.cached_at >= CACHE_TTL]
            for k in expired:
                self._cache.pop(k, None)
            if expired:
                logger.debug(LogTemplates.CACHE_EXPIRED_PRUNED, len(expired))
            # Still full: evict oldest insertions first.
            while len(self._cache) > CACHE_MAX_SIZE:
                self._cache.pop(next(iter(self._cache)))

    def clear_cache(self) -> int:
        with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info(LogTemplates.CACHE_CLEARED, count)
        return count

    @property
    def cache_size(self) -> int:
        with self._cache_lock:
            return len(self._cache)
