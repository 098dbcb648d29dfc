"""
Unit Tests for Application Settings Configuration

- defaults and validation of each settings group
- aliases and immutability
- loading nested values from environment variables
- settings caching and clearing
"""

import pytest
from pydantic import SecretStr, ValidationError

from desuu_prime.config.settings import (
    AudioSettings,
    DiscordSettings,
    Settings,
    VoiceSettings,
    clear_settings_cache,
    get_settings,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run from an empty directory so a developer's .env is never read."""
    monkeypatch.chdir(tmp_path)
    for name in ("ENVIRONMENT", "DEBUG", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestDiscordSettings:
    def test_defaults(self):
        discord = DiscordSettings()

        assert discord.token.get_secret_value() == ""
        assert discord.command_prefix == "!"
        assert discord.owner_ids == ()
        assert discord.test_guild_ids == ()
        assert discord.sync_on_startup is True

    def test_token_is_secret(self):
        discord = DiscordSettings(token=SecretStr("abc"))
        assert "abc" not in repr(discord)
        assert discord.token.get_secret_value() == "abc"

    @pytest.mark.parametrize("alias", ["bot_token", "discord_token"])
    def test_token_aliases(self, alias):
        discord = DiscordSettings(**{alias: SecretStr("abc")})
        assert discord.token.get_secret_value() == "abc"

    def test_prefix_length_bounds(self):
        with pytest.raises(ValidationError):
            DiscordSettings(command_prefix="")
        with pytest.raises(ValidationError):
            DiscordSettings(command_prefix="toolong")

    def test_snowflake_lists_become_tuples(self):
        discord = DiscordSettings(owner_ids=[123456789012345678], test_guild_ids=[1])
        assert discord.owner_ids == (123456789012345678,)
        assert discord.test_guild_ids == (1,)

    @pytest.mark.parametrize("bad", [0, -5, 2**64])
    def test_invalid_snowflakes_rejected(self, bad):
        with pytest.raises(ValidationError):
            DiscordSettings(owner_ids=[bad])

    def test_immutable(self):
        discord = DiscordSettings()
        with pytest.raises(ValidationError):
            discord.command_prefix = "?"


class TestAudioSettings:
    def test_defaults(self):
        audio = AudioSettings()

        assert audio.default_volume == 0.5
        assert audio.ytdlp_format == "bestaudio/best"
        assert audio.search_prefix == "ytsearch"
        assert audio.pot_server_url is None
        assert audio.notification_sound == "assets/beep.mp3"
        assert audio.notify_on_play is True

    @pytest.mark.parametrize("volume", [-0.1, 2.1])
    def test_volume_bounds(self, volume):
        with pytest.raises(ValidationError):
            AudioSettings(default_volume=volume)

    def test_notification_sound_alias(self):
        assert AudioSettings(beep_path="/tmp/ding.wav").notification_sound == "/tmp/ding.wav"

    def test_pot_server_alias(self):
        audio = AudioSettings(bgutil_pot_server_url="http://127.0.0.1:4416")
        assert audio.pot_server_url == "http://127.0.0.1:4416"


class TestVoiceSettings:
    def test_default_timeout(self):
        assert VoiceSettings().connect_timeout_seconds == 10.0

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            VoiceSettings(connect_timeout_seconds=0)


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.audio, AudioSettings)

    def test_log_level_normalised(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="staging")

    def test_loads_from_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("DISCORD__TOKEN", "env-token")
        monkeypatch.setenv("DISCORD__TEST_GUILD_IDS", "[111, 222]")
        monkeypatch.setenv("AUDIO__NOTIFY_ON_PLAY", "false")
        monkeypatch.setenv("AUDIO__DEFAULT_VOLUME", "0.8")
        monkeypatch.setenv("VOICE__CONNECT_TIMEOUT_SECONDS", "5")

        settings = Settings()

        assert settings.environment == "production"
        assert settings.debug is True
        assert settings.log_level == "WARNING"
        assert settings.discord.token.get_secret_value() == "env-token"
        assert settings.discord.test_guild_ids == (111, 222)
        assert settings.audio.notify_on_play is False
        assert settings.audio.default_volume == 0.8
        assert settings.voice.connect_timeout_seconds == 5.0

    def test_loads_from_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("LOG_LEVEL=ERROR\nAUDIO__SEARCH_PREFIX=scsearch\n")

        settings = Settings()

        assert settings.log_level == "ERROR"
        assert settings.audio.search_prefix == "scsearch"


class TestSettingsCache:
    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_settings() is first

        clear_settings_cache()

        second = get_settings()
        assert second is not first
        assert second.log_level == "ERROR"
