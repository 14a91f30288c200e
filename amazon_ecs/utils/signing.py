from __future__ import annotations

import base64
import hmac
from datetime import datetime, timezone
from typing import Mapping
from urllib.parse import quote

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def rfc3986_quote(value: str) -> str:
    """
    Percent-encode everything except the RFC 3986 unreserved set (A-Z a-z 0-9 - _ . ~).
    Space becomes %20, never '+'. Non-ASCII text is encoded as UTF-8 first.
    """
    # %7E must never reach the signed string.
    return quote(value, safe="").replace("%7E", "~")


def format_timestamp(moment: datetime) -> str:
    """Render a moment as an ISO-8601 UTC timestamp with a 'Z' suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def canonical_query(params: Mapping[str, str]) -> str:
    """
    Serialize parameters as the signing input: sorted by key, both sides
    encoded with rfc3986_quote, joined as key=value pairs with '&'.
    """
    # Code-point order equals UTF-8 byte order, which is what the service sorts by.
    pairs = []
    for key in sorted(params):
        pairs.append(f"{rfc3986_quote(key)}={rfc3986_quote(str(params[key]))}")
    return "&".join(pairs)


def string_to_sign(method: str, host: str, uri_path: str, query: str) -> str:
    # Exactly four lines, no trailing newline.
    return "\n".join([method, host, uri_path, query])


def sign(payload: str, key: str, algorithm: str = "sha256") -> str:
    """
    HMAC the payload with the private key, base64 the raw digest and
    percent-encode the result so it can be appended to a URL as-is.
    """
    digest = hmac.new(key.encode("utf-8"), payload.encode("utf-8"), algorithm).digest()
    return rfc3986_quote(base64.b64encode(digest).decode("ascii"))
