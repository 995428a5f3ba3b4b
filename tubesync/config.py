"""
Configuration management using Pydantic Settings.
Loads from environment variables with sensible defaults for development.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tubesync.sync.models import DEFAULT_FEED_URL_TEMPLATE, SyncConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Sync settings
    channel_ids: str = ""  # Comma-separated YouTube channel IDs (UCxxxx)
    video_location: str = ""  # Library root, one folder per channel
    episodes: int = Field(3, ge=1)  # Newest non-short videos kept per channel
    auto_delete_played: bool = False  # Delete watched episodes beyond `episodes`
    dry_run: bool = False

    # Acquisition
    yt_dlp_path: str = "yt-dlp"  # Resolved via PATH unless absolute
    media_extensions: str = ".mp4"  # Comma-separated

    # Feed fetching
    feed_url_template: str = DEFAULT_FEED_URL_TEMPLATE
    http_timeout: float = 30.0  # seconds
    fetch_retry_attempts: int = Field(3, ge=1)

    # Scheduler
    scheduler_enabled: bool = True
    sync_interval_hours: float = Field(1.0, gt=0)
    run_on_startup: bool = False

    # Server settings
    admin_api_key: str = "dev-admin-key"  # For protected endpoints
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    @property
    def channel_list(self) -> list[str]:
        """Parse comma-separated channel IDs into list."""
        if not self.channel_ids:
            return []
        return [c.strip() for c in self.channel_ids.split(",") if c.strip()]

    @property
    def media_extension_list(self) -> tuple[str, ...]:
        """Normalized media extensions, lowercase with leading dot."""
        extensions = []
        for ext in self.media_extensions.split(","):
            ext = ext.strip().lower()
            if not ext:
                continue
            extensions.append(ext if ext.startswith(".") else f".{ext}")
        return tuple(extensions) or (".mp4",)

    def to_sync_config(self) -> Optional[SyncConfig]:
        """
        Snapshot the settings into an immutable run configuration.

        Returns None when no library location is configured, which the
        orchestrator treats as missing configuration.
        """
        if not self.video_location.strip():
            return None

        return SyncConfig(
            channel_ids=tuple(self.channel_list),
            video_location=Path(self.video_location.strip()).expanduser(),
            episodes=self.episodes,
            auto_delete_played=self.auto_delete_played,
            feed_url_template=self.feed_url_template,
            yt_dlp_path=self.yt_dlp_path,
            http_timeout=self.http_timeout,
            fetch_retry_attempts=self.fetch_retry_attempts,
            media_extensions=self.media_extension_list,
            dry_run=self.dry_run,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
