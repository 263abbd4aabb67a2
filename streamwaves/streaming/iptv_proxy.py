"""
IPTV API proxy.

Forwards Xtream-style player API calls (get_live_streams, get_short_epg,
...) to the provider on behalf of the browser, which cannot reach most
providers directly because of CORS and mixed-content rules.
"""

import ipaddress
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from streamwaves.cache.base import CacheBackend, build_cache_key
from streamwaves.config import ProxyConfig
from streamwaves.streaming.dns_resolver import DNSResolver
from streamwaves.streaming.errors import ErrorClassifier, ProxyError

logger = logging.getLogger(__name__)

# Request fields copied onto the origin query string, in order
OVERLAY_PARAMS = ("username", "password", "action", "stream_id", "limit")

# Characters a URL host may never contain, besides controls
FORBIDDEN_HOST_CHARS = frozenset(" #%/:<>?@[\\]^|")


@dataclass
class ProxyRequest:
    """Parameters of a proxied IPTV API call."""

    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    action: Optional[str] = None
    stream_id: Optional[str] = None
    limit: Optional[str] = None
    dns: Optional[str] = None

    @property
    def cache_key(self) -> str:
        return build_cache_key(
            self.url or "",
            self.username,
            self.password,
            self.action,
            self.stream_id,
            self.limit,
            self.dns,
        )


@dataclass
class ProxyResult:
    """Outcome of a proxied call: the origin's JSON body or an error."""

    data: Any = None
    error: Optional[ProxyError] = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def is_valid_host(hostname: str) -> bool:
    """Reject empty hosts and hosts containing URL-forbidden code points."""
    if not hostname:
        return False
    if ":" in hostname:
        # Only a bracketed IPv6 literal may contain colons
        try:
            return ipaddress.ip_address(hostname).version == 6
        except ValueError:
            return False
    return not any(
        ch in FORBIDDEN_HOST_CHARS or ord(ch) < 0x20 or ord(ch) == 0x7F
        for ch in hostname
    )


def validate_url(url: Optional[str]) -> Optional[ProxyError]:
    """Check that url is present and parses as an absolute URL."""
    if not url:
        return ProxyError.validation("URL parameter is required")

    try:
        parts = urlsplit(url)
        # Accessing port validates it
        parts.port
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return ProxyError.validation("Invalid URL format")

    if not parts.scheme or not parts.netloc:
        return ProxyError.validation("Invalid URL format")

    if not is_valid_host(parts.hostname or ""):
        return ProxyError.validation("Invalid URL format")

    return None


def build_target_url(request: ProxyRequest) -> str:
    """
    Overlay the request's IPTV parameters onto the target URL query.

    A present field replaces an existing parameter of the same name in
    place (dropping any duplicates); new parameters are appended. Fields
    that are absent leave the existing query untouched.
    """
    parts = urlsplit(request.url)
    params = parse_qsl(parts.query, keep_blank_values=True)

    for name in OVERLAY_PARAMS:
        value = getattr(request, name)
        if not value:
            continue

        updated = []
        replaced = False
        for key, existing in params:
            if key != name:
                updated.append((key, existing))
            elif not replaced:
                updated.append((key, value))
                replaced = True
        if not replaced:
            updated.append((name, value))
        params = updated

    return urlunsplit(parts._replace(query=urlencode(params)))


def substitute_host(url: str, address: str) -> str:
    """Replace the hostname of url with address, keeping the port."""
    parts = urlsplit(url)
    host = f"[{address}]" if ":" in address else address
    netloc = f"{host}:{parts.port}" if parts.port else host
    if "@" in parts.netloc:
        netloc = parts.netloc.rsplit("@", 1)[0] + "@" + netloc
    return urlunsplit(parts._replace(netloc=netloc))


class IPTVQueryProxy:
    """
    Validates, caches and forwards IPTV API requests.

    Identical requests within the cache TTL are answered from the cache
    without contacting the origin or resolving DNS.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: CacheBackend,
        resolver: DNSResolver,
        config: Optional[ProxyConfig] = None,
        cache_ttl: int = 300,
    ):
        self.client = client
        self.cache = cache
        self.resolver = resolver
        self.config = config or ProxyConfig()
        self.cache_ttl = cache_ttl

    async def handle(self, request: ProxyRequest) -> ProxyResult:
        """
        Serve a proxied IPTV API call.

        Args:
            request: The inbound request parameters.

        Returns:
            ProxyResult carrying the origin JSON or a ProxyError.
        """
        error = validate_url(request.url)
        if error:
            return ProxyResult(error=error)

        cache_key = request.cache_key
        cached_data = await self.cache.get(cache_key)
        if cached_data is not None:
            logger.info("Returning cached data")
            return ProxyResult(data=cached_data, cached=True)

        try:
            data = await self._fetch(request)
        except Exception as e:
            error = ErrorClassifier.from_exception(e)
            logger.error(f"Proxy error: {error.message}")
            return ProxyResult(error=error)

        await self.cache.set(cache_key, data, ttl=self.cache_ttl)
        return ProxyResult(data=data)

    async def _fetch(self, request: ProxyRequest) -> Any:
        target_url = build_target_url(request)
        parts = urlsplit(target_url)
        hostname = parts.hostname or ""

        headers = {"User-Agent": self.config.user_agent}
        extensions = {}

        resolved = await self.resolver.resolve(hostname, request.dns)
        if resolved != hostname:
            final_url = substitute_host(target_url, resolved)
            # The origin still sees the original name in Host and TLS SNI
            headers["Host"] = parts.netloc.rsplit("@", 1)[-1]
            if parts.scheme == "https":
                extensions["sni_hostname"] = hostname
            logger.debug(f"Using resolved address {resolved} for {hostname}")
        else:
            final_url = target_url

        response = await self.client.get(
            final_url,
            headers=headers,
            extensions=extensions,
            timeout=self.config.timeout_seconds,
            follow_redirects=self.config.follow_redirects,
        )
        response.raise_for_status()
        return response.json()
