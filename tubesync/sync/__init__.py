"""
Channel sync package.

Mirrors the newest uploads of configured YouTube channels into a local
media library with yt-dlp, skipping files already on disk and optionally
pruning watched episodes.
"""

from tubesync.sync.errors import (
    AcquisitionError,
    ConfigMissing,
    FeedError,
    NetworkError,
    ParseError,
    SyncAlreadyRunning,
    SyncCancelled,
    TubeSyncError,
)
from tubesync.sync.feed_fetcher import FeedFetcher, parse_feed, select_entries
from tubesync.sync.models import (
    ChannelFeed,
    ChannelResult,
    DownloadOutcome,
    EntryResult,
    FeedEntry,
    MediaFile,
    SyncConfig,
    SyncStats,
)
from tubesync.sync.naming import normalize_title
from tubesync.sync.orchestrator import SyncOrchestrator
from tubesync.sync.retention import enforce_retention
from tubesync.sync.scheduler import RunStatus, SyncScheduler
from tubesync.sync.ytdlp import YtDlp

__all__ = [
    "AcquisitionError",
    "ConfigMissing",
    "FeedError",
    "NetworkError",
    "ParseError",
    "SyncAlreadyRunning",
    "SyncCancelled",
    "TubeSyncError",
    "FeedFetcher",
    "parse_feed",
    "select_entries",
    "ChannelFeed",
    "ChannelResult",
    "DownloadOutcome",
    "EntryResult",
    "FeedEntry",
    "MediaFile",
    "SyncConfig",
    "SyncStats",
    "normalize_title",
    "SyncOrchestrator",
    "enforce_retention",
    "RunStatus",
    "SyncScheduler",
    "YtDlp",
]
