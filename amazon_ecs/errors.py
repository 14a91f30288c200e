from __future__ import annotations

from typing import Optional


class ProductSearchError(Exception):
    """Base class for every failure raised by the ECS client."""


class RequestFailure(ProductSearchError):
    """
    The transport did not produce a usable response.
    ``status`` is None when no HTTP response arrived at all (DNS, connection
    reset, ...) and holds the HTTP status code for non-2xx answers.
    """

    def __init__(self, url: str, status: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        if status is None:
            message = f"Request failed without a response: {reason}"
        else:
            message = f"Request failed with HTTP {status}: {reason}"
        super().__init__(message)


class ResponseParseError(ProductSearchError):
    """The response payload could not be parsed as XML."""
