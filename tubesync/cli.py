"""
Channel sync CLI.

Runs one sync pass over the configured channels: fetches each channel's
feed, downloads new videos with yt-dlp and, when enabled, removes watched
episodes beyond the per-channel cap.

Usage:
    tubesync-sync                       # Sync using .env / environment settings
    tubesync-sync --channels UC1,UC2    # Override the channel list
    tubesync-sync --dry-run             # Preview without downloading or deleting
    tubesync-sync --config              # Show current configuration
    tubesync-sync --check               # Check that yt-dlp is runnable
"""

import argparse
import dataclasses
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from tubesync.config import get_settings
from tubesync.sync import (
    ConfigMissing,
    SyncCancelled,
    SyncConfig,
    SyncOrchestrator,
    SyncStats,
    YtDlp,
)

logger = logging.getLogger(__name__)


def progress_callback(percent: float):
    """Display progress during sync."""
    bar_width = 40
    filled = int(bar_width * percent / 100)
    bar = "=" * filled + "-" * (bar_width - filled)
    print(f"\r[{bar}] {percent:5.1f}%", end="", flush=True)


def show_config():
    """Display current sync configuration."""
    settings = get_settings()

    print("\n=== Sync Configuration ===\n")
    print(f"Video location: {settings.video_location or 'Not set'}")
    print(f"Channels: {', '.join(settings.channel_list) or 'Not set'}")
    print(f"Episodes per channel: {settings.episodes}")
    print(f"Auto-delete played: {settings.auto_delete_played}")
    print(f"Media extensions: {', '.join(settings.media_extension_list)}")
    print(f"\nyt-dlp: {settings.yt_dlp_path}")
    print(f"Feed URL: {settings.feed_url_template}")
    print(f"\nScheduler: {'enabled' if settings.scheduler_enabled else 'disabled'}, "
          f"every {settings.sync_interval_hours}h")


def check_yt_dlp() -> bool:
    """Report whether yt-dlp can be run."""
    settings = get_settings()
    version = YtDlp(executable=settings.yt_dlp_path).version()
    if version:
        print(f"yt-dlp {version} ({settings.yt_dlp_path})")
        return True
    print(f"yt-dlp not found or not runnable: {settings.yt_dlp_path}")
    print("Install with: pip install yt-dlp (or your package manager)")
    return False


def build_config(
    channels: Optional[str] = None,
    video_location: Optional[Path] = None,
    episodes: Optional[int] = None,
    auto_delete: Optional[bool] = None,
    dry_run: bool = False,
) -> Optional[SyncConfig]:
    """Settings snapshot with command-line overrides applied."""
    settings = get_settings()
    overrides = {}
    if channels is not None:
        overrides["channel_ids"] = channels
    if video_location is not None:
        overrides["video_location"] = str(video_location)
    if episodes is not None:
        overrides["episodes"] = episodes
    if auto_delete is not None:
        overrides["auto_delete_played"] = auto_delete
    if overrides:
        settings = settings.model_copy(update=overrides)

    config = settings.to_sync_config()
    if config is not None and dry_run:
        config = dataclasses.replace(config, dry_run=True)
    return config


def run_sync(config: Optional[SyncConfig]) -> SyncStats:
    """
    Run the sync on a worker thread so Ctrl-C can cancel it cleanly.

    The first interrupt requests cancellation and waits for the current
    yt-dlp child to be stopped.
    """
    orchestrator = SyncOrchestrator()
    cancel_event = threading.Event()
    outcome: dict = {}

    def work():
        try:
            outcome["stats"] = orchestrator.run(
                config, progress=progress_callback, cancel_event=cancel_event
            )
        except BaseException as e:
            outcome["error"] = e

    worker = threading.Thread(target=work, name="tubesync-cli")
    worker.start()
    try:
        while worker.is_alive():
            worker.join(timeout=0.5)
    except KeyboardInterrupt:
        print("\nCancelling, waiting for the current download to stop...")
        cancel_event.set()
        worker.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["stats"]


def print_summary(stats: SyncStats, dry_run: bool = False):
    print("\n\n" + "=" * 60)
    print("SYNC COMPLETE")
    print("=" * 60)
    print(stats)

    if stats.errors:
        print("\nErrors:")
        for error in stats.errors[:10]:
            print(f"  - {error}")
        if len(stats.errors) > 10:
            print(f"  ... and {len(stats.errors) - 10} more errors")

    if dry_run:
        print("\n[DRY RUN] No files were downloaded or deleted")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Mirror recent YouTube channel uploads into a local library",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tubesync-sync                         # Sync configured channels
  tubesync-sync --channels UCabc,UCdef  # Sync specific channels
  tubesync-sync --dry-run               # Preview changes
  tubesync-sync --auto-delete           # Also remove watched episodes
        """,
    )

    parser.add_argument(
        "--channels",
        help="Comma-separated channel IDs (overrides CHANNEL_IDS)",
    )
    parser.add_argument(
        "--video-location",
        type=Path,
        help="Library root directory (overrides VIDEO_LOCATION)",
    )
    parser.add_argument(
        "--episodes",
        type=int,
        help="Newest videos to keep per channel (overrides EPISODES)",
    )
    parser.add_argument(
        "--auto-delete",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove watched episodes beyond the cap (overrides AUTO_DELETE_PLAYED)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview what would happen without downloading or deleting",
    )
    parser.add_argument(
        "--config",
        action="store_true",
        help="Show current configuration and exit",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check that yt-dlp is runnable and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.config:
        show_config()
        return 0

    if args.check:
        return 0 if check_yt_dlp() else 1

    if args.episodes is not None and args.episodes < 1:
        parser.error("--episodes must be a positive integer")

    config = build_config(
        channels=args.channels,
        video_location=args.video_location,
        episodes=args.episodes,
        auto_delete=args.auto_delete,
        dry_run=args.dry_run,
    )

    try:
        stats = run_sync(config)
    except ConfigMissing:
        print("\nConfiguration error: VIDEO_LOCATION is not set")
        print("Set it in .env or pass --video-location")
        return 1
    except SyncCancelled:
        print("\nSync cancelled")
        return 130
    except Exception as e:
        print(f"\nSync failed: {e}")
        logger.exception("Sync error")
        return 1

    print_summary(stats, dry_run=config.dry_run if config is not None else args.dry_run)
    return 1 if stats.channels_failed else 0


if __name__ == "__main__":
    sys.exit(main())
