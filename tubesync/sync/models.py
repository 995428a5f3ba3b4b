"""
Data types shared by the sync pipeline.

Everything here is a plain dataclass: run configuration, feed entries,
local library records, and per-entry / per-channel / per-run outcomes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Literal, Optional

SHORTS_MARKER = "shorts"
DEFAULT_FEED_URL_TEMPLATE = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"

ChannelStatus = Literal["synced", "failed"]


@dataclass(frozen=True)
class SyncConfig:
    """Immutable configuration for one sync run."""

    channel_ids: tuple[str, ...]
    video_location: Path
    episodes: int = 3
    auto_delete_played: bool = False
    feed_url_template: str = DEFAULT_FEED_URL_TEMPLATE
    yt_dlp_path: str = "yt-dlp"
    http_timeout: float = 30.0
    fetch_retry_attempts: int = 3
    media_extensions: tuple[str, ...] = (".mp4",)
    dry_run: bool = False


@dataclass
class FeedEntry:
    """One video listed in a channel feed."""

    title: str
    url: str
    video_id: Optional[str] = None
    published: Optional[datetime] = None

    @property
    def is_short(self) -> bool:
        return SHORTS_MARKER in self.url.lower()


@dataclass
class ChannelFeed:
    """A parsed channel feed: display name plus entries in document order."""

    channel_id: str
    display_name: str
    entries: list[FeedEntry] = field(default_factory=list)


@dataclass
class ChannelSession:
    """Per-channel state for one orchestrator iteration."""

    channel_id: str
    display_name: str
    directory: Path


@dataclass
class MediaFile:
    """A media file in a channel folder together with its sidecars."""

    path: Path
    created_at: float  # POSIX timestamp
    sidecars: list[Path] = field(default_factory=list)
    watched: bool = False

    @property
    def base_name(self) -> str:
        return self.path.stem

    @property
    def nfo_path(self) -> Path:
        return self.path.with_suffix(".nfo")

    @property
    def all_paths(self) -> list[Path]:
        """The media file followed by every sidecar sharing its base name."""
        return [self.path, *self.sidecars]


class DownloadOutcome(str, Enum):
    DOWNLOADED = "downloaded"
    SKIPPED_EXISTING = "skipped_existing"
    FAILED = "failed"


@dataclass
class EntryResult:
    """Result of processing one feed entry."""

    title: str
    url: str
    outcome: DownloadOutcome
    exit_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class ChannelResult:
    """Outcome of one channel iteration, success or tagged failure."""

    channel_id: str
    status: ChannelStatus
    display_name: Optional[str] = None
    directory: Optional[Path] = None
    entries: list[EntryResult] = field(default_factory=list)
    deleted: list[Path] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "synced"

    def count(self, outcome: DownloadOutcome) -> int:
        return sum(1 for e in self.entries if e.outcome == outcome)


@dataclass
class SyncStats:
    """Statistics from a sync run."""

    channels_total: int = 0
    channels_synced: int = 0
    channels_failed: int = 0
    downloaded: int = 0
    skipped_existing: int = 0
    failed: int = 0
    deleted: int = 0
    errors: list[str] = field(default_factory=list)
    channels: list[ChannelResult] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def add(self, result: ChannelResult) -> None:
        """Fold one channel result into the run totals."""
        self.channels.append(result)
        if result.ok:
            self.channels_synced += 1
        else:
            self.channels_failed += 1
            self.errors.append(f"{result.channel_id}: {result.error}")

        self.downloaded += result.count(DownloadOutcome.DOWNLOADED)
        self.skipped_existing += result.count(DownloadOutcome.SKIPPED_EXISTING)
        self.failed += result.count(DownloadOutcome.FAILED)
        self.deleted += len(result.deleted)

        for entry in result.entries:
            if entry.outcome == DownloadOutcome.FAILED:
                self.errors.append(f"{result.channel_id}: {entry.title}: {entry.error}")

    def __str__(self) -> str:
        return (
            f"Channels: {self.channels_synced}/{self.channels_total} synced, "
            f"{self.channels_failed} failed\n"
            f"Downloaded: {self.downloaded}\n"
            f"Already present: {self.skipped_existing}\n"
            f"Failed downloads: {self.failed}\n"
            f"Deleted (watched): {self.deleted}\n"
            f"Errors: {len(self.errors)}"
        )
