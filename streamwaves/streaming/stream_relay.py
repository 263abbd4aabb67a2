"""
Stream relay for video segments and HLS manifests.

Binary media is passed through chunk by chunk with range headers
preserved, so seeking works and large files are never held in memory.
HLS media playlists are fetched whole and their relative segment paths
rewritten to absolute origin URLs.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Optional

import httpx

from streamwaves.config import StreamConfig
from streamwaves.streaming.errors import ErrorKind, ProxyError, exception_message
from streamwaves.streaming.hls import (
    HLS_CONTENT_TYPE,
    base_url_of,
    is_hls_url,
    is_master_playlist,
    rewrite_media_playlist,
)

logger = logging.getLogger(__name__)


class RelayState(str, Enum):
    """Lifecycle of a single relay request."""

    RECEIVED = "received"
    VALIDATED = "validated"
    FETCHING = "fetching"
    REWRITING = "rewriting"
    RELAYING = "relaying"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RelayResult:
    """
    Outcome of a relay request.

    Exactly one of content (manifests), body (binary media) or error is set.
    """

    state: RelayState = RelayState.RECEIVED
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    media_type: Optional[str] = None
    content: Optional[bytes] = None
    body: Optional["RelayBody"] = None
    error: Optional[ProxyError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    async def aclose(self) -> None:
        """Release the upstream response behind body, if any. Idempotent."""
        if self.body is not None:
            await self.body.aclose()


class RelayBody:
    """
    Async iterator over an upstream media body.

    Chunks are yielded as the origin produces them. aclose() releases the
    upstream response whether or not iteration ever started.
    """

    def __init__(self, result: RelayResult, response: httpx.Response):
        self._result = result
        self._response = response
        self._chunks = self._iter_chunks()

    def __aiter__(self) -> "RelayBody":
        return self

    async def __anext__(self) -> bytes:
        return await self._chunks.__anext__()

    async def aclose(self) -> None:
        await self._chunks.aclose()
        await self._release()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_raw():
                yield chunk
            self._result.state = RelayState.COMPLETED
        except httpx.HTTPError as e:
            logger.error(f"Streaming error mid-body: {exception_message(e)}")
            raise
        finally:
            await self._release()

    async def _release(self) -> None:
        if self._result.state != RelayState.COMPLETED:
            if self._result.state != RelayState.FAILED:
                # Client went away or the origin failed part way through
                logger.info(f"Relay of {self._response.request.url} aborted before completion")
            self._result.state = RelayState.FAILED
        if not self._response.is_closed:
            await asyncio.shield(self._response.aclose())


def is_acceptable_status(status_code: int) -> bool:
    """Origins may answer ranged requests with non-2xx codes below 400."""
    return 200 <= status_code < 400


class StreamRelay:
    """Fetches a stream URL and relays it to the client."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: Optional[StreamConfig] = None,
        public_origin: str = "http://localhost:5173",
    ):
        self.client = client
        self.config = config or StreamConfig()
        self.public_origin = public_origin.rstrip("/")

    def build_headers(self, range_header: Optional[str] = None) -> dict[str, str]:
        """Outbound headers presented to the origin."""
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "*/*",
            "Accept-Language": self.config.accept_language,
            "Origin": self.public_origin,
            "Referer": f"{self.public_origin}/",
        }
        if range_header:
            headers["Range"] = range_header
        return headers

    async def handle(self, url: Optional[str], range_header: Optional[str] = None) -> RelayResult:
        """
        Relay a stream or manifest.

        Args:
            url: Origin URL to fetch.
            range_header: Inbound Range header, forwarded verbatim.

        Returns:
            RelayResult describing what to send back to the client.
        """
        result = RelayResult()

        if not url:
            result.state = RelayState.FAILED
            result.error = ProxyError.validation("URL parameter is required")
            return result

        result.state = RelayState.VALIDATED
        hls = is_hls_url(url)
        response: Optional[httpx.Response] = None

        try:
            result.state = RelayState.FETCHING
            request = self.client.build_request(
                "GET",
                url,
                headers=self.build_headers(range_header),
                timeout=self.config.timeout_seconds,
            )
            response = await self.client.send(request, stream=True, follow_redirects=True)

            # Enforced here as well, since the injected client may allow more
            if len(response.history) > self.config.max_redirects:
                raise httpx.TooManyRedirects(
                    "Exceeded maximum allowed redirects.", request=request
                )

            if not is_acceptable_status(response.status_code):
                raise httpx.HTTPStatusError(
                    f"Request failed with status code {response.status_code}",
                    request=request,
                    response=response,
                )

            if hls:
                try:
                    await response.aread()
                finally:
                    await response.aclose()
                self._build_manifest(result, url, response)
            else:
                self._build_passthrough(result, response)
        except Exception as e:
            if response is not None:
                await response.aclose()
            logger.error(f"Streaming error: {exception_message(e)}")
            result.state = RelayState.FAILED
            result.error = ProxyError(
                kind=ErrorKind.INTERNAL,
                message=exception_message(e),
                status_code=500,
                original_exception=e,
            )

        return result

    def _build_manifest(self, result: RelayResult, url: str, response: httpx.Response) -> None:
        result.status_code = 200
        result.media_type = HLS_CONTENT_TYPE
        result.headers = {"Content-Type": HLS_CONTENT_TYPE}

        playlist = response.text
        if is_master_playlist(playlist):
            # Variant URLs in a master playlist are passed through untouched
            result.content = response.content
            result.state = RelayState.COMPLETED
            return

        result.state = RelayState.REWRITING
        rewritten = rewrite_media_playlist(playlist, base_url_of(url))
        result.content = rewritten.encode(response.encoding or "utf-8")
        result.state = RelayState.COMPLETED

    def _build_passthrough(self, result: RelayResult, response: httpx.Response) -> None:
        content_type = response.headers.get("Content-Type", "application/octet-stream")
        headers = {
            "Content-Type": content_type,
            "Accept-Ranges": "bytes",
        }
        for name in ("Content-Length", "Content-Range", "Content-Encoding"):
            value = response.headers.get(name)
            if value:
                headers[name] = value

        result.status_code = response.status_code
        result.media_type = content_type
        result.headers = headers
        result.state = RelayState.RELAYING
        result.body = RelayBody(result, response)
