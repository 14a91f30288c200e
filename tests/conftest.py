from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import pytest

from amazon_ecs.apis.product_search import ProductSearch
from amazon_ecs.errors import RequestFailure
from amazon_ecs.utils.parsing import parse_xml

FIXED_NOW = datetime(2009, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

SAMPLE_RESPONSE = b"""<?xml version="1.0" ?>
<ItemSearchResponse xmlns="http://webservices.amazon.com/AWSECommerceService/2009-03-31">
  <OperationRequest>
    <RequestId>0ac4f3e2-1d9c-4a3b-9a8e-6f7c1c2d3e4f</RequestId>
  </OperationRequest>
  <Items>
    <Request><IsValid>True</IsValid></Request>
    <TotalResults>2</TotalResults>
    <Item>
      <ASIN>0439708184</ASIN>
      <ItemAttributes><Title>Harry Potter and the Sorcerer's Stone</Title></ItemAttributes>
    </Item>
    <Item>
      <ASIN>0439064872</ASIN>
      <ItemAttributes><Title>Harry Potter and the Chamber of Secrets</Title></ItemAttributes>
    </Item>
  </Items>
</ItemSearchResponse>
"""

ERROR_RESPONSE = b"""<?xml version="1.0"?>
<ItemSearchErrorResponse xmlns="http://ecs.amazonaws.com/doc/2009-03-31/">
  <Error><Code>SignatureDoesNotMatch</Code><Message>Signature mismatch.</Message></Error>
  <RequestId>5b2f0c1e-0000-0000-0000-000000000000</RequestId>
</ItemSearchErrorResponse>
"""


class StubTransport:
    """Records requested URLs and answers with a canned payload (or a failure)."""

    def __init__(self, payload: bytes = SAMPLE_RESPONSE, fail: bool = False, user_agent: str | None = None) -> None:
        self.payload = payload
        self.fail = fail
        self.user_agent = user_agent
        self.urls: List[str] = []

    def __call__(self, url: str) -> bytes:
        self.urls.append(url)
        if self.fail:
            raise RequestFailure(url, reason="connection refused")
        return self.payload


class RecordingParser:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, payload: bytes):
        self.calls += 1
        return parse_xml(payload)


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def parser() -> RecordingParser:
    return RecordingParser()


@pytest.fixture
def client(transport: StubTransport, parser: RecordingParser) -> ProductSearch:
    return ProductSearch("PK", "SK", "TAG", transport=transport, parser=parser, clock=lambda: FIXED_NOW)
