"""
Error kinds shared by the IPTV proxy and the stream relay.

Components report failures as ProxyError values instead of raising them
across their boundary. The HTTP layer decides the status code and body.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx


class ErrorKind(str, Enum):
    """Classification of proxy failures."""

    VALIDATION = "validation"  # Missing or malformed request parameters
    ORIGIN = "origin"  # Origin answered with an error status
    NETWORK = "network"  # Timeouts, connection failures, DNS failures
    INTERNAL = "internal"  # Anything else, e.g. an unparseable body


@dataclass
class ProxyError:
    """A failure reported by a proxy component."""

    kind: ErrorKind
    message: str
    status_code: int = 500
    original_exception: Optional[Exception] = None

    @classmethod
    def validation(cls, message: str) -> "ProxyError":
        return cls(kind=ErrorKind.VALIDATION, message=message, status_code=400)


def exception_message(error: BaseException) -> str:
    """Text of an exception, falling back to its type for blank messages."""
    return str(error) or error.__class__.__name__


class ErrorClassifier:
    """Turns exceptions raised while talking to an origin into ProxyErrors."""

    @staticmethod
    def from_exception(error: Exception) -> ProxyError:
        """
        Classify an exception into a ProxyError.

        Args:
            error: The exception to classify.

        Returns:
            ProxyError with kind, status code and message filled in.
        """
        if isinstance(error, httpx.HTTPStatusError):
            response = error.response
            return ProxyError(
                kind=ErrorKind.ORIGIN,
                message=f"{response.status_code} - {response.reason_phrase}",
                status_code=response.status_code,
                original_exception=error,
            )

        if isinstance(error, httpx.RequestError):
            return ProxyError(
                kind=ErrorKind.NETWORK,
                message=exception_message(error),
                original_exception=error,
            )

        return ProxyError(
            kind=ErrorKind.INTERNAL,
            message=exception_message(error),
            original_exception=error,
        )
