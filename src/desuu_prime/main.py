#!/usr/bin/env python3
"""Main entry point for desuu-prime."""

from __future__ import annotations

import json
import logging
import logging.config
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from desuu_prime.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from desuu_prime.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", config_path: Path = _LOGGING_CONFIG_PATH) -> None:
    """Apply ``logging_config.json``; fall back to basicConfig if it is unusable."""
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logger.warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path)

    logging.getLogger().setLevel(resolved_level)


def check_dependencies() -> bool:
    """Check the external binaries playback relies on.

    ffmpeg is mandatory. A missing JavaScript runtime only degrades yt-dlp.
    """
    if not shutil.which("ffmpeg"):
        logger.error(ErrorMessages.FFMPEG_REQUIRED)
        return False
    if not (shutil.which("deno") or shutil.which("node")):
        logger.warning(LogTemplates.JS_RUNTIME_MISSING)
    return True


def log_startup(settings: Settings) -> None:
    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    audio = settings.audio
    logger.info(
        LogTemplates.AUDIO_CONFIG, audio.search_prefix, audio.ytdlp_format, audio.notify_on_play
    )


def main() -> int:
    from desuu_prime.config.settings import get_settings

    settings = get_settings()
    setup_logging("DEBUG" if settings.debug else settings.log_level)

    token = settings.discord.token.get_secret_value()
    if not token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1
    if not check_dependencies():
        return 1

    log_startup(settings)

    from desuu_prime.config.container import create_container
    from desuu_prime.infrastructure.discord.bot import create_bot

    bot = create_bot(create_container(settings), settings)

    try:
        bot.run_with_graceful_shutdown(token)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1
    else:
        logger.info(LogTemplates.BOT_STOPPED)
    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
