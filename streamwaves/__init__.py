"""
StreamWaves - IPTV API proxy and stream relay

Backend service for the StreamWaves playlist viewer:
- Xtream-style IPTV API proxying with response caching
- Optional custom DNS resolution per request
- Video stream relay with HTTP range passthrough
- HLS media playlist rewriting
"""

__version__ = "1.0.0"
__author__ = "StreamWaves Contributors"
__license__ = "MIT"

from streamwaves.config import get_config, load_config

__all__ = [
    "__version__",
    "get_config",
    "load_config",
]
