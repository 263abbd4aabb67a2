"""IPTV proxy and stream relay endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from streamwaves.streaming.errors import ErrorKind, ProxyError
from streamwaves.streaming.iptv_proxy import IPTVQueryProxy, ProxyRequest
from streamwaves.streaming.stream_relay import StreamRelay

logger = logging.getLogger(__name__)

router = APIRouter()


def get_iptv_proxy(request: Request) -> IPTVQueryProxy:
    """Dependency returning the proxy built during application startup."""
    return request.app.state.iptv_proxy


def get_stream_relay(request: Request) -> StreamRelay:
    """Dependency returning the relay built during application startup."""
    return request.app.state.stream_relay


def proxy_error_response(error: ProxyError) -> JSONResponse:
    """Translate a proxy failure into the JSON error body sent to the player."""
    if error.kind == ErrorKind.VALIDATION:
        return JSONResponse(status_code=400, content={"error": error.message})
    if error.kind == ErrorKind.ORIGIN:
        return JSONResponse(
            status_code=error.status_code,
            content={"error": f"Proxy error: {error.message}"},
        )
    return JSONResponse(
        status_code=500,
        content={"error": f"Internal server error: {error.message}"},
    )


def stream_error_response(error: ProxyError) -> JSONResponse:
    """Translate a relay failure into the JSON error body sent to the player."""
    if error.kind == ErrorKind.VALIDATION:
        return JSONResponse(status_code=400, content={"error": error.message})
    return JSONResponse(
        status_code=500,
        content={"error": "Streaming error", "details": error.message},
    )


@router.get("/iptv", response_model=None)
async def proxy_iptv(
    url: Optional[str] = Query(None, description="Provider API URL"),
    username: Optional[str] = None,
    password: Optional[str] = None,
    action: Optional[str] = None,
    stream_id: Optional[str] = None,
    limit: Optional[str] = None,
    dns: Optional[str] = Query(None, description="Custom nameserver for the provider host"),
    proxy: IPTVQueryProxy = Depends(get_iptv_proxy),
):
    """
    Proxy an Xtream-style player API call.

    Returns the provider's JSON response, served from cache when the same
    request was made within the cache TTL.
    """
    result = await proxy.handle(
        ProxyRequest(
            url=url,
            username=username,
            password=password,
            action=action,
            stream_id=stream_id,
            limit=limit,
            dns=dns,
        )
    )
    if result.error:
        return proxy_error_response(result.error)
    return JSONResponse(content=result.data)


@router.get("/stream", response_model=None)
async def relay_stream(
    request: Request,
    url: Optional[str] = Query(None, description="Stream or manifest URL"),
    relay: StreamRelay = Depends(get_stream_relay),
):
    """
    Relay a media stream or HLS manifest.

    The inbound Range header is forwarded to the origin so players can seek.
    """
    result = await relay.handle(url, request.headers.get("Range"))
    if result.error:
        return stream_error_response(result.error)

    if result.body is not None:
        return StreamingResponse(
            result.body,
            status_code=result.status_code,
            headers=result.headers,
            media_type=result.media_type,
            background=BackgroundTask(result.aclose),
        )

    return Response(
        content=result.content,
        status_code=result.status_code,
        media_type=result.media_type,
    )
