"""Tests for settings loading and run-config snapshots."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tubesync.config import Settings, get_settings


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestSettings:
    """Test Settings parsing."""

    def test_defaults(self) -> None:
        settings = _settings()

        assert settings.episodes == 3
        assert settings.auto_delete_played is False
        assert settings.channel_list == []
        assert settings.media_extension_list == (".mp4",)
        assert settings.sync_interval_hours == 1.0

    def test_channel_list_parsing(self) -> None:
        """Test channel IDs are split, trimmed and empties dropped."""
        settings = _settings(channel_ids=" UC1, UC2 ,,UC3 ,")

        assert settings.channel_list == ["UC1", "UC2", "UC3"]

    def test_media_extension_normalization(self) -> None:
        settings = _settings(media_extensions="MP4, mkv,.WebM")

        assert settings.media_extension_list == (".mp4", ".mkv", ".webm")

    def test_from_environment(self, monkeypatch, tmp_path: Path) -> None:
        """Test values come from environment variables, case-insensitively."""
        monkeypatch.setenv("CHANNEL_IDS", "UCa,UCb")
        monkeypatch.setenv("video_location", str(tmp_path))
        monkeypatch.setenv("EPISODES", "5")
        monkeypatch.setenv("AUTO_DELETE_PLAYED", "true")

        settings = get_settings()

        assert settings.channel_list == ["UCa", "UCb"]
        assert settings.video_location == str(tmp_path)
        assert settings.episodes == 5
        assert settings.auto_delete_played is True

    def test_settings_cached(self) -> None:
        assert get_settings() is get_settings()

    @pytest.mark.parametrize("field,value", [("episodes", 0), ("fetch_retry_attempts", 0), ("sync_interval_hours", 0)])
    def test_invalid_values(self, field: str, value) -> None:
        with pytest.raises(ValidationError):
            _settings(**{field: value})


class TestToSyncConfig:
    """Test Settings.to_sync_config()."""

    def test_snapshot(self, tmp_path: Path) -> None:
        settings = _settings(
            channel_ids="UC1,UC2",
            video_location=str(tmp_path),
            episodes=4,
            auto_delete_played=True,
            media_extensions="mp4,mkv",
        )

        config = settings.to_sync_config()

        assert config.channel_ids == ("UC1", "UC2")
        assert config.video_location == tmp_path
        assert config.episodes == 4
        assert config.auto_delete_played is True
        assert config.media_extensions == (".mp4", ".mkv")
        assert config.dry_run is False

    @pytest.mark.parametrize("location", ["", "   "])
    def test_missing_location(self, location: str) -> None:
        """Test no library location means no usable configuration."""
        assert _settings(channel_ids="UC1", video_location=location).to_sync_config() is None

    def test_snapshot_is_immutable(self, tmp_path: Path) -> None:
        config = _settings(video_location=str(tmp_path)).to_sync_config()

        with pytest.raises(AttributeError):
            config.episodes = 10
