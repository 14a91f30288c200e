from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Union
import logging

from bs4 import BeautifulSoup, Tag

from ..config import REQUEST_DEFAULTS, OperationOptions, RequestDefaults, SearchConfig
from ..errors import RequestFailure
from ..utils.http import AiohttpTransport, Transport
from ..utils.loader import load_symbol
from ..utils.parsing import items_node, parse_xml
from ..utils.signing import canonical_query, format_timestamp, sign, string_to_sign

logger = logging.getLogger(__name__)

Parser = Callable[[bytes], BeautifulSoup]
Clock = Callable[[], datetime]
SearchResult = Union[BeautifulSoup, Tag, bytes, None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SignedRequest:
    query: str
    signature: str
    url: str


class ProductSearch:
    """
    Signed request builder for the ECS item-search API.

    Each stage takes the previous stage's output and returns its own, so no
    request state lives on the instance and one builder can serve several
    threads:

        query = ps.build_parameters({"Keywords": "Harry Potter", "SearchIndex": "Books"})
        items = ps.output(query)

    ``search`` wraps both steps for the common case.
    """

    def __init__(
        self,
        public_key: str,
        private_key: str,
        associate_tag: str,
        region: str = "com",
        *,
        options: Optional[OperationOptions] = None,
        transport: Optional[Transport] = None,
        parser: Optional[Parser] = None,
        clock: Optional[Clock] = None,
        defaults: RequestDefaults = REQUEST_DEFAULTS,
    ) -> None:
        # Credentials are not checked here: bad ones surface as an authentication error from the service.
        self._public_key = public_key
        self._private_key = private_key
        self._associate_tag = associate_tag
        self._region = region
        self.options = options or OperationOptions()
        self.defaults = defaults
        self.transport: Transport = transport or AiohttpTransport()
        self.parser: Parser = parser or parse_xml
        self.clock: Clock = clock or utc_now

    @classmethod
    def from_config(cls, config: SearchConfig, **kwargs: Any) -> "ProductSearch":
        """Build a client from SearchConfig, loading the transport class from its dotted path."""
        if "transport" not in kwargs:
            transport_cls = load_symbol(config.transport)
            kwargs["transport"] = transport_cls(user_agent=config.user_agent)
        return cls(
            config.public_key,
            config.private_key,
            config.associate_tag,
            config.region,
            options=config.operation_options(),
            **kwargs,
        )

    @property
    def region(self) -> str:
        return self._region

    @property
    def host(self) -> str:
        return f"{self.defaults.endpoint_host}{self._region}".lower()

    # ---- Request building ----

    def build_parameters(
        self,
        extra: Optional[Mapping[str, str]] = None,
        *,
        options: Optional[OperationOptions] = None,
    ) -> str:
        """
        Merge the fixed account/operation fields over ``extra`` and return the
        canonical query string (sorted, strictly percent-encoded).
        """
        opts = options or self.options
        params: Dict[str, str] = dict(extra or {})
        params["AWSAccessKeyId"] = self._public_key
        params["AssociateTag"] = self._associate_tag
        params["Service"] = opts.service_name
        params["Timestamp"] = format_timestamp(self.clock())
        params["Version"] = opts.api_version
        params["Operation"] = opts.operation
        params["ResponseGroup"] = opts.response_group
        query = canonical_query(params)
        logger.debug("Canonical query: %s", query)
        return query

    def compute_signature(self, query: str) -> str:
        payload = string_to_sign(self.defaults.http_method, self.host, self.defaults.uri_path, query)
        return sign(payload, self._private_key, self.defaults.hash_algorithm)

    def assemble_url(self, query: str) -> str:
        return (
            f"{self.defaults.scheme}://{self.defaults.endpoint_host}{self._region}{self.defaults.uri_path}"
            f"?{query}&Signature={self.compute_signature(query)}"
        )

    def prepare(
        self,
        extra: Optional[Mapping[str, str]] = None,
        *,
        options: Optional[OperationOptions] = None,
    ) -> SignedRequest:
        """Build, sign and format a request without sending it."""
        query = self.build_parameters(extra, options=options)
        signature = self.compute_signature(query)
        url = self.assemble_url(query)
        return SignedRequest(query=query, signature=signature, url=url)

    # ---- Dispatch / output ----

    def dispatch(self, url: str) -> bytes:
        """Send the signed URL through the transport (GET, no body)."""
        logger.debug("%s %s", self.defaults.http_method, url)
        try:
            return self.transport(url)
        except RequestFailure:
            raise
        except OSError as exc:
            # Injected transports may surface plain socket errors.
            raise RequestFailure(url, reason=repr(exc)) from exc

    def output(self, query: str, raw: bool = False, items_only: bool = True) -> SearchResult:
        """
        Dispatch the request for ``query`` and post-process the answer:
        ``raw`` returns the bytes untouched, otherwise the XML is parsed and
        either the ``Items`` node (``items_only``) or the whole document is returned.
        RequestFailure and ResponseParseError propagate unchanged.
        """
        payload = self.dispatch(self.assemble_url(query))
        if raw:
            return payload

        document = self.parser(payload)
        if not items_only:
            return document

        items = items_node(document)
        if items is None:
            logger.debug("Response has no Items node")
        return items

    def search(
        self,
        keywords: str,
        index: str = "Books",
        raw: bool = False,
        *,
        options: Optional[OperationOptions] = None,
    ) -> SearchResult:
        """Search ``index`` for ``keywords``; returns the Items node, or the raw bytes with ``raw=True``."""
        query = self.build_parameters({"Keywords": keywords, "SearchIndex": index}, options=options)
        return self.output(query, raw=raw)
