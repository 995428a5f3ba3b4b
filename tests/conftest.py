"""Shared fixtures for tubesync tests."""

import os
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

import pytest

from tubesync.config import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def build_feed(title: Optional[str], entries: list[tuple[str, str]]) -> bytes:
    """Build a YouTube-style Atom feed from (title, url) pairs."""
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" '
        'xmlns:media="http://search.yahoo.com/mrss/" '
        'xmlns="http://www.w3.org/2005/Atom">',
        '<link rel="self" href="http://www.youtube.com/feeds/videos.xml?channel_id=UCtest"/>',
        "<id>yt:channel:UCtest</id>",
        "<yt:channelId>UCtest</yt:channelId>",
    ]
    if title is not None:
        parts.append(f"<title>{escape(title)}</title>")
    for i, (entry_title, url) in enumerate(entries):
        video_id = f"vid{i}"
        parts.append(
            "<entry>"
            f"<id>yt:video:{video_id}</id>"
            f"<yt:videoId>{video_id}</yt:videoId>"
            f"<title>{escape(entry_title)}</title>"
            f'<link rel="alternate" href="{escape(url)}"/>'
            f"<published>2024-01-{i + 1:02d}T12:00:00+00:00</published>"
            "</entry>"
        )
    parts.append("</feed>")
    return "\n".join(parts).encode("utf-8")


def make_media(
    directory: Path,
    name: str,
    mtime: float,
    watched: Optional[bool] = None,
    sidecars: tuple[str, ...] = (),
    ext: str = ".mp4",
) -> Path:
    """
    Create a media file, optionally with an .nfo sidecar and extra sidecars.

    `watched=None` means no .nfo at all.
    """
    directory.mkdir(parents=True, exist_ok=True)
    media = directory / f"{name}{ext}"
    media.write_bytes(b"\x00" * 16)
    os.utime(media, (mtime, mtime))

    if watched is not None:
        nfo = directory / f"{name}.nfo"
        nfo.write_text(
            "<?xml version=\"1.0\" encoding=\"utf-8\"?>\n"
            f"<episodedetails><title>{escape(name)}</title>"
            f"<watched>{'true' if watched else 'false'}</watched></episodedetails>",
            encoding="utf-8",
        )

    for suffix in sidecars:
        (directory / f"{name}{suffix}").write_text("sidecar", encoding="utf-8")

    return media


@pytest.fixture
def mtime_clock(monkeypatch):
    """Use modification time as creation time so tests control file age."""
    from tubesync.sync import library

    monkeypatch.setattr(library, "_created_at", lambda path: path.stat().st_mtime)


@pytest.fixture
def feed_builder():
    return build_feed


@pytest.fixture
def media_factory():
    return make_media
