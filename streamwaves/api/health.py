"""Health check API endpoint for StreamWaves"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from streamwaves import __version__

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("")
async def health_check() -> dict[str, Any]:
    """Basic liveness check."""
    return {
        "status": "ok",
        "timestamp": utc_timestamp(),
        "version": __version__,
    }
