"""
Local library index for a channel's download folder.

Answers two questions for the orchestrator: "is this title already on
disk?" and "which media files exist, how old are they, and have they been
watched?". Watch state comes from the .nfo sidecar the media server writes
next to each video.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError as DefusedXMLParseError
from defusedxml.ElementTree import parse as safe_parse

from tubesync.sync.models import MediaFile

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS: tuple[str, ...] = (".mp4",)


def _is_media(path: Path, extensions: Iterable[str]) -> bool:
    return path.is_file() and path.suffix.lower() in extensions


def _created_at(path: Path) -> float:
    """
    File creation time where the platform records it.

    Linux has no portable birth time and st_ctime there is the inode change
    time, so modification time stands in.
    """
    stat = path.stat()
    return getattr(stat, "st_birthtime", None) or stat.st_mtime


def exists(
    directory: Path,
    normalized_title: str,
    extensions: Iterable[str] = MEDIA_EXTENSIONS,
) -> bool:
    """Check whether a media file named `normalized_title` is in `directory`."""
    directory = Path(directory)
    if not directory.is_dir():
        return False

    extensions = tuple(ext.lower() for ext in extensions)
    wanted = normalized_title.lower()
    for path in directory.iterdir():
        if _is_media(path, extensions) and path.stem.lower() == wanted:
            return True
    return False


def read_watch_state(nfo_path: Path) -> bool:
    """
    Read the watched flag from an .nfo sidecar.

    Missing, unreadable or malformed sidecars count as not watched so that
    retention never deletes on ambiguous state.
    """
    if not nfo_path.is_file():
        return False

    try:
        root = safe_parse(nfo_path).getroot()
    except (DefusedXMLParseError, DefusedXmlException, OSError) as e:
        logger.warning(f"Could not read watch state from {nfo_path.name}: {e}")
        return False

    watched = root.find("watched")
    if watched is None or watched.text is None:
        return False
    return watched.text.strip().lower() == "true"


def list_media_files(
    directory: Path,
    extensions: Iterable[str] = MEDIA_EXTENSIONS,
) -> list[MediaFile]:
    """
    List media files oldest-first, each grouped with its sidecars.

    A non-media file belongs to the media file with the longest base name
    it starts with (followed by a dot), so "Ep 1.nfo" and "Ep 1.en.vtt" go
    with "Ep 1.mp4" while "Ep 1.5.nfo" goes with "Ep 1.5.mp4".
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    extensions = tuple(ext.lower() for ext in extensions)
    files = sorted(p for p in directory.iterdir() if p.is_file())

    media: dict[str, MediaFile] = {}
    for path in files:
        if _is_media(path, extensions) and path.stem not in media:
            media[path.stem] = MediaFile(path=path, created_at=_created_at(path))
    bases = sorted(media, key=len, reverse=True)

    for path in files:
        if path.stem in media and media[path.stem].path == path:
            continue
        for base in bases:
            if path.name.startswith(base + "."):
                media[base].sidecars.append(path)
                break

    for item in media.values():
        item.watched = read_watch_state(item.nfo_path)

    return sorted(media.values(), key=lambda m: (m.created_at, m.path.name))


def delete_record(item: MediaFile) -> list[Path]:
    """
    Delete a media file and all of its sidecars.

    Each file is removed independently; failures are logged and the rest
    are still attempted. Returns the paths actually deleted.
    """
    deleted = []
    for path in item.all_paths:
        try:
            os.remove(path)
            deleted.append(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Failed to delete associated file {path}: {e}")
    return deleted
