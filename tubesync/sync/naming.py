"""
Filename normalization for matching feed titles against files on disk.

Unsafe characters are swapped for look-alikes rather than stripped so that
titles stay readable and two titles differing only in punctuation do not
collapse onto the same file.
"""

_REPLACEMENTS = str.maketrans({
    "|": "｜",  # fullwidth vertical line
    ":": "：",  # fullwidth colon
    "/": "_",
    "\\": "_",
    '"': "“",  # left double quotation mark
    "<": "_",
    ">": "_",
    "*": "_",
    "?": "？",  # fullwidth question mark
})


def normalize_title(title: str) -> str:
    """Map a raw feed title to the file base name yt-dlp produces for it."""
    return title.translate(_REPLACEMENTS).strip()
