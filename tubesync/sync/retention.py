"""
Retention policy for channel folders.

Greedy oldest-watched-first eviction: walk media files from oldest to
newest and delete watched ones until only `keep_count` files remain.
Unwatched files are never deleted and do not stop the walk.
"""

import logging
from pathlib import Path
from typing import Iterable

from tubesync.sync.library import MEDIA_EXTENSIONS, delete_record, list_media_files

logger = logging.getLogger(__name__)


def enforce_retention(
    directory: Path,
    keep_count: int,
    extensions: Iterable[str] = MEDIA_EXTENSIONS,
    dry_run: bool = False,
) -> list[Path]:
    """
    Delete watched media (with sidecars) beyond the retention floor.

    Args:
        directory: Channel download folder
        keep_count: Number of media files that must always remain
        extensions: Accepted media extensions
        dry_run: Log what would be deleted without deleting

    Returns:
        Paths that were deleted (or would be, in a dry run)
    """
    if keep_count < 0:
        raise ValueError(f"keep_count must be non-negative, got {keep_count}")

    files = list_media_files(directory, extensions)
    remaining = len(files)
    deleted: list[Path] = []

    for item in files:
        if remaining <= keep_count:
            break

        if not item.watched:
            continue

        if dry_run:
            logger.info(f"[DRY RUN] Would remove watched episode {item.path.name}")
            deleted.extend(item.all_paths)
        else:
            logger.info(f"Removing watched episode {item.path.name}")
            deleted.extend(delete_record(item))

        remaining -= 1

    if deleted:
        logger.info(f"Retention removed {len(deleted)} files from {directory}")
    return deleted
