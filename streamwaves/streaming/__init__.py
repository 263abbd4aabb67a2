"""
Outbound side of StreamWaves.

- DNSResolver: optional per-request custom nameserver lookups
- IPTVQueryProxy: cached Xtream-style API proxying
- StreamRelay: range-preserving media relay and HLS rewriting
"""

from streamwaves.streaming.dns_resolver import DNSResolver
from streamwaves.streaming.errors import ErrorClassifier, ErrorKind, ProxyError
from streamwaves.streaming.iptv_proxy import IPTVQueryProxy, ProxyRequest, ProxyResult
from streamwaves.streaming.stream_relay import RelayBody, RelayResult, RelayState, StreamRelay

__all__ = [
    "DNSResolver",
    "ErrorClassifier",
    "ErrorKind",
    "IPTVQueryProxy",
    "ProxyError",
    "ProxyRequest",
    "ProxyResult",
    "RelayBody",
    "RelayResult",
    "RelayState",
    "StreamRelay",
]
