"""
Unit tests for HLS manifest helpers.
"""

import pytest

from streamwaves.streaming.hls import (
    base_url_of,
    is_hls_url,
    is_master_playlist,
    rewrite_media_playlist,
)

MASTER_PLAYLIST = """#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=1280000,RESOLUTION=1280x720
https://cdn.example.com/live/720p.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2560000,RESOLUTION=1920x1080
https://cdn.example.com/live/1080p.m3u8
"""


@pytest.mark.unit
class TestClassification:
    """Tests for manifest detection."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://host/path/playlist.m3u8",
            "http://host:8080/live/user/pass/123.m3u8?token=abc",
        ],
    )
    def test_hls_urls(self, url):
        assert is_hls_url(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://host/movie/user/pass/55.mp4",
            "https://host/live/user/pass/123.ts",
            "https://host/get.php?type=m3u8",
            "https://host/playlist.m3u8.bak",
        ],
    )
    def test_non_hls_urls(self, url):
        assert is_hls_url(url) is False

    def test_master_playlist_marker(self):
        assert is_master_playlist(MASTER_PLAYLIST) is True
        assert is_master_playlist("#EXTM3U\n#EXTINF:10,\nseg1.ts\n") is False

    def test_base_url_keeps_trailing_slash(self):
        assert base_url_of("https://host/path/playlist.m3u8") == "https://host/path/"


@pytest.mark.unit
class TestRewriteMediaPlaylist:
    """Tests for relative segment rewriting."""

    def test_relative_segments_prefixed(self):
        text = "#EXTINF:10,\nseg1.ts\nseg2.ts"

        rewritten = rewrite_media_playlist(text, "https://host/path/")

        assert rewritten == "#EXTINF:10,\nhttps://host/path/seg1.ts\nhttps://host/path/seg2.ts"

    def test_tags_untouched(self):
        text = (
            "#EXTM3U\n"
            "#EXT-X-TARGETDURATION:10\n"
            "#EXT-X-MEDIA-SEQUENCE:7\n"
            "#EXTINF:10.0,\n"
            "chunk_7.ts\n"
            "#EXT-X-ENDLIST\n"
        )

        rewritten = rewrite_media_playlist(text, "http://cdn/hls/")

        assert rewritten.splitlines() == [
            "#EXTM3U",
            "#EXT-X-TARGETDURATION:10",
            "#EXT-X-MEDIA-SEQUENCE:7",
            "#EXTINF:10.0,",
            "http://cdn/hls/chunk_7.ts",
            "#EXT-X-ENDLIST",
        ]

    def test_absolute_segments_untouched(self):
        text = "#EXTINF:10,\nhttps://other.example.com/seg1.ts\nseg2.ts\n"

        rewritten = rewrite_media_playlist(text, "https://host/path/")

        assert "https://other.example.com/seg1.ts\n" in rewritten
        assert "https://host/path/https://" not in rewritten
        assert "https://host/path/seg2.ts\n" in rewritten

    def test_non_ts_lines_untouched(self):
        text = "#EXTINF:10,\nsegment.aac\nkey.bin\n"

        assert rewrite_media_playlist(text, "https://host/path/") == text

    def test_crlf_line_endings_preserved(self):
        text = "#EXTINF:10,\r\nseg1.ts\r\nseg2.ts\r\n"

        rewritten = rewrite_media_playlist(text, "https://host/path/")

        assert rewritten == "#EXTINF:10,\r\nhttps://host/path/seg1.ts\r\nhttps://host/path/seg2.ts\r\n"

    def test_segment_with_subdirectory(self):
        rewritten = rewrite_media_playlist("#EXTINF:4,\n720p/000123.ts\n", "https://host/live/")

        assert rewritten == "#EXTINF:4,\nhttps://host/live/720p/000123.ts\n"
