"""Signed request builder for the Amazon ECS item-search API."""

from .apis.product_search import ProductSearch, SignedRequest
from .config import OperationOptions, RequestDefaults, SearchConfig
from .errors import ProductSearchError, RequestFailure, ResponseParseError
from .version import __version__

__all__ = [
    "ProductSearch",
    "SignedRequest",
    "OperationOptions",
    "RequestDefaults",
    "SearchConfig",
    "ProductSearchError",
    "RequestFailure",
    "ResponseParseError",
    "__version__",
]
