"""
Sync orchestrator for YouTube channel mirroring.

Coordinates, per configured channel:
1. Feed retrieval (newest uploads)
2. Short-form filtering and the per-channel episode cap
3. Dedup against files already in the channel folder
4. yt-dlp download for new videos
5. Retention of watched episodes (when auto-delete is enabled)
6. Progress reporting

Channels are processed strictly one after another. A failing channel is
logged and recorded, and the run moves on to the next one.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from tubesync.sync import library
from tubesync.sync.errors import AcquisitionError, ConfigMissing, FeedError, SyncCancelled
from tubesync.sync.feed_fetcher import FeedFetcher, select_entries
from tubesync.sync.models import (
    ChannelFeed,
    ChannelResult,
    ChannelSession,
    DownloadOutcome,
    EntryResult,
    FeedEntry,
    SyncConfig,
    SyncStats,
)
from tubesync.sync.naming import normalize_title
from tubesync.sync.retention import enforce_retention
from tubesync.sync.ytdlp import YtDlp

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SyncCancelled("sync run cancelled")


class SyncOrchestrator:
    """
    Runs one sync pass over every configured channel.

    Usage:
        orchestrator = SyncOrchestrator()

        # Full sync
        stats = orchestrator.run(settings.to_sync_config())

        # With progress and cancellation
        cancel = threading.Event()
        stats = orchestrator.run(config, progress=print, cancel_event=cancel)
    """

    def __init__(
        self,
        fetcher: Optional[FeedFetcher] = None,
        downloader: Optional[YtDlp] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            fetcher: FeedFetcher instance (built from the run config if not provided)
            downloader: YtDlp instance (built from the run config if not provided)
        """
        self._fetcher = fetcher
        self._downloader = downloader

    def _fetcher_for(self, config: SyncConfig) -> FeedFetcher:
        if self._fetcher is not None:
            return self._fetcher
        return FeedFetcher(
            url_template=config.feed_url_template,
            timeout=config.http_timeout,
            retry_attempts=config.fetch_retry_attempts,
        )

    def _downloader_for(self, config: SyncConfig) -> YtDlp:
        if self._downloader is not None:
            return self._downloader
        return YtDlp(executable=config.yt_dlp_path)

    def run(
        self,
        config: Optional[SyncConfig],
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SyncStats:
        """
        Sync every configured channel.

        Args:
            config: Run configuration (None means no configuration is available)
            progress: Optional callback receiving a percentage in [0, 100]
            cancel_event: Optional event; when set the run stops at the next
                entry boundary or while waiting on yt-dlp

        Returns:
            SyncStats with per-channel results

        Raises:
            ConfigMissing: config is None; no channel is processed
            SyncCancelled: cancel_event was set during the run
        """
        logger.info("YouTube sync started.")

        if config is None:
            logger.error("Sync configuration is missing.")
            raise ConfigMissing("no sync configuration available")

        fetcher = self._fetcher_for(config)
        downloader = self._downloader_for(config)

        channels = list(config.channel_ids)
        total = len(channels)
        stats = SyncStats(channels_total=total, started_at=datetime.now(timezone.utc))

        if not channels:
            logger.warning("No channels configured, nothing to sync")

        for i, channel_id in enumerate(channels):
            _check_cancelled(cancel_event)
            logger.info(
                f"Syncing to: {config.video_location}, for ChannelId: {channel_id}, "
                f"Episodes: {config.episodes}, AutoDelete: {config.auto_delete_played}"
            )

            result = self._sync_channel(channel_id, config, fetcher, downloader, cancel_event)
            stats.add(result)

            if progress:
                progress(100.0 * (i + 1) / total)

        if progress:
            progress(100.0)

        stats.finished_at = datetime.now(timezone.utc)
        logger.info(f"YouTube sync completed.\n{stats}")
        return stats

    def _sync_channel(
        self,
        channel_id: str,
        config: SyncConfig,
        fetcher: FeedFetcher,
        downloader: YtDlp,
        cancel_event: Optional[threading.Event],
    ) -> ChannelResult:
        """
        Process one channel end to end.

        Never raises except for cancellation; failures come back as a
        ChannelResult with status "failed".
        """
        result = ChannelResult(channel_id=channel_id, status="synced")

        try:
            feed = fetcher.fetch(channel_id)
            session = self._open_session(feed, config)
            result.display_name = session.display_name
            result.directory = session.directory

            entries = select_entries(feed.entries, config.episodes)
            logger.info(f"Selected {len(entries)} of {len(feed.entries)} entries for '{feed.display_name}'")

            for entry in entries:
                _check_cancelled(cancel_event)
                result.entries.append(
                    self._process_entry(entry, session, config, downloader, cancel_event)
                )

            if config.auto_delete_played:
                logger.info("Removing watched episodes")
                result.deleted = enforce_retention(
                    session.directory,
                    config.episodes,
                    extensions=config.media_extensions,
                    dry_run=config.dry_run,
                )

        except SyncCancelled:
            raise
        except FeedError as e:
            logger.error(f"Could not retrieve feed for channel {channel_id}: {e}")
            result.status = "failed"
            result.error = str(e)
        except Exception as e:
            logger.exception(f"YouTube sync failed for channel {channel_id}")
            result.status = "failed"
            result.error = str(e)

        return result

    def _open_session(self, feed: ChannelFeed, config: SyncConfig) -> ChannelSession:
        """Resolve (and create if needed) the channel's download folder."""
        logger.info(f"Get channel name: {feed.display_name}")

        folder_name = normalize_title(feed.display_name)
        if folder_name in ("", ".", ".."):
            folder_name = feed.channel_id

        directory = config.video_location / folder_name
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created download folder: {directory}")

        return ChannelSession(
            channel_id=feed.channel_id,
            display_name=feed.display_name,
            directory=directory,
        )

    def _process_entry(
        self,
        entry: FeedEntry,
        session: ChannelSession,
        config: SyncConfig,
        downloader: YtDlp,
        cancel_event: Optional[threading.Event],
    ) -> EntryResult:
        """Skip, download, or fail a single feed entry."""
        title = entry.title
        logger.info(f"Found video: {title} - {entry.url}")

        if not entry.url:
            logger.error(f"Feed entry has no link, skipping: {title}")
            return EntryResult(title, entry.url, DownloadOutcome.FAILED, error="entry has no link")

        normalized = normalize_title(title)
        if library.exists(session.directory, normalized, config.media_extensions):
            logger.info(f"Skipping download, file already exists: {title}")
            return EntryResult(title, entry.url, DownloadOutcome.SKIPPED_EXISTING)

        if config.dry_run:
            logger.info(f"[DRY RUN] Would download: {title}")
            return EntryResult(title, entry.url, DownloadOutcome.DOWNLOADED)

        logger.info(f"Downloading file: {title}")
        try:
            exit_code = downloader.acquire(entry.url, session.directory, cancel_event=cancel_event)
        except AcquisitionError as e:
            logger.error(f"Could not run yt-dlp for video {title}: {e}")
            return EntryResult(title, entry.url, DownloadOutcome.FAILED, error=str(e))

        if exit_code == 0:
            logger.info(f"Downloaded successfully: {title}")
            return EntryResult(title, entry.url, DownloadOutcome.DOWNLOADED, exit_code=0)

        logger.error(f"yt-dlp exited with code {exit_code} for video: {title}")
        return EntryResult(
            title,
            entry.url,
            DownloadOutcome.FAILED,
            exit_code=exit_code,
            error=f"yt-dlp exited with code {exit_code}",
        )
