"""Tests for the main entry point."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from pydantic import SecretStr

from desuu_prime.main import check_dependencies, cli, main


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.token = SecretStr("test_token_123")
    settings.log_level = "INFO"
    settings.debug = False
    settings.environment = "test"
    settings.audio.search_prefix = "ytsearch"
    settings.audio.ytdlp_format = "bestaudio/best"
    settings.audio.notify_on_play = True
    return settings


def _which(*available):
    return lambda name: f"/usr/bin/{name}" if name in available else None


def _run_main(settings, bot, which=_which("ffmpeg", "node")):
    with (
        patch("desuu_prime.config.settings.get_settings", return_value=settings),
        patch("desuu_prime.main.setup_logging") as mock_setup_logging,
        patch("shutil.which", side_effect=which),
        patch("desuu_prime.config.container.create_container") as mock_create_container,
        patch("desuu_prime.infrastructure.discord.bot.create_bot", return_value=bot) as mock_create_bot,
    ):
        code = main()
    return code, mock_setup_logging, mock_create_container, mock_create_bot


# =============================================================================
# main
# =============================================================================


class TestMain:
    def test_missing_token_returns_error(self, mock_settings):
        mock_settings.discord.token = SecretStr("")
        bot = MagicMock()

        code, _, create_container, _ = _run_main(mock_settings, bot)

        assert code == 1
        create_container.assert_not_called()

    def test_missing_ffmpeg_returns_error(self, mock_settings, caplog):
        bot = MagicMock()

        with caplog.at_level(logging.ERROR):
            code, _, create_container, _ = _run_main(mock_settings, bot, which=_which("node"))

        assert code == 1
        assert "ffmpeg was not found" in caplog.text
        create_container.assert_not_called()
        bot.run_with_graceful_shutdown.assert_not_called()

    def test_successful_run(self, mock_settings):
        bot = MagicMock()

        code, setup_logging, create_container, create_bot = _run_main(mock_settings, bot)

        assert code == 0
        setup_logging.assert_called_once_with("INFO")
        create_container.assert_called_once_with(mock_settings)
        create_bot.assert_called_once_with(create_container.return_value, mock_settings)
        bot.run_with_graceful_shutdown.assert_called_once_with("test_token_123")

    def test_startup_logs_audio_config(self, mock_settings, caplog):
        with caplog.at_level(logging.INFO, logger="desuu_prime.main"):
            _run_main(mock_settings, MagicMock())

        assert "Starting desuu-prime in test mode" in caplog.text
        assert "Search prefix 'ytsearch', format 'bestaudio/best', notify on play: True" in caplog.text

    def test_debug_forces_debug_logging(self, mock_settings):
        mock_settings.debug = True

        _, setup_logging, _, _ = _run_main(mock_settings, MagicMock())

        setup_logging.assert_called_once_with("DEBUG")

    def test_keyboard_interrupt_is_clean_exit(self, mock_settings):
        bot = MagicMock()
        bot.run_with_graceful_shutdown.side_effect = KeyboardInterrupt()

        code, *_ = _run_main(mock_settings, bot)

        assert code == 0

    def test_crash_returns_error(self, mock_settings):
        bot = MagicMock()
        bot.run_with_graceful_shutdown.side_effect = RuntimeError("Bot crashed!")

        code, *_ = _run_main(mock_settings, bot)

        assert code == 1

    def test_cli_exits_with_main_code(self):
        with patch("desuu_prime.main.main", return_value=3), pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == 3


# =============================================================================
# check_dependencies
# =============================================================================


class TestCheckDependencies:
    def test_all_present(self, caplog):
        with patch("shutil.which", side_effect=_which("ffmpeg", "deno")), caplog.at_level(logging.WARNING):
            assert check_dependencies() is True
        assert caplog.text == ""

    def test_missing_ffmpeg(self):
        with patch("shutil.which", side_effect=_which("node")):
            assert check_dependencies() is False

    def test_missing_js_runtime_only_warns(self, caplog):
        with patch("shutil.which", side_effect=_which("ffmpeg")), caplog.at_level(logging.WARNING):
            assert check_dependencies() is True
        assert "Neither deno nor node" in caplog.text
