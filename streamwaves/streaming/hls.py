"""
HLS manifest helpers for the stream relay.

This is a line-oriented text transform, not a playlist parser: only
relative .ts segment lines of a media playlist are touched.
"""

import re
from urllib.parse import urlsplit

HLS_CONTENT_TYPE = "application/vnd.apple.mpegurl"
MASTER_PLAYLIST_MARKER = "#EXT-X-STREAM-INF"

# A non-comment, non-absolute line ending in .ts. The lookahead tolerates CRLF.
_SEGMENT_LINE = re.compile(
    r"^(?!#)(?![A-Za-z][A-Za-z0-9+.\-]*://)(.+\.ts)(?=\r?$)",
    re.MULTILINE,
)


def is_hls_url(url: str) -> bool:
    """True when the URL path names an .m3u8 manifest."""
    return urlsplit(url).path.endswith(".m3u8")


def is_master_playlist(text: str) -> bool:
    """Master playlists list variant streams instead of segments."""
    return MASTER_PLAYLIST_MARKER in text


def base_url_of(url: str) -> str:
    """Everything up to and including the last '/' of the URL."""
    return url[: url.rfind("/") + 1]


def rewrite_media_playlist(text: str, base_url: str) -> str:
    """
    Prefix relative segment references with base_url.

    Comment/tag lines and absolute URLs are left as they are.
    """
    return _SEGMENT_LINE.sub(lambda match: base_url + match.group(1), text)
