from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from lxml import etree

from ..errors import ResponseParseError


def parse_xml(payload: bytes) -> BeautifulSoup:
    """
    Parse an ECS response into a BeautifulSoup document (lxml XML builder, so
    tag names keep their case: ``doc.find("Items")``).
    The payload must be well-formed XML: truncated bodies, mismatched tags and
    HTML error pages raise ResponseParseError instead of being repaired.
    """
    # bs4 runs lxml in recovery mode, so well-formedness is checked strictly first.
    try:
        etree.fromstring(payload)
    except etree.XMLSyntaxError as exc:
        raise ResponseParseError(f"Response is not well-formed XML: {exc}") from exc

    try:
        soup = BeautifulSoup(payload, "xml")
    except (ParserRejectedMarkup, etree.LxmlError) as exc:
        raise ResponseParseError(f"Response is not XML: {exc}") from exc

    if root_element(soup) is None:
        raise ResponseParseError(f"Response is not XML: no root element in {len(payload)} bytes")
    return soup


def root_element(document: BeautifulSoup) -> Optional[Tag]:
    return document.find(True)


def items_node(document: BeautifulSoup) -> Optional[Tag]:
    """
    Return the ``Items`` child of the root element (``ItemSearchResponse`` for searches),
    or None when the response carries no such node, e.g. an error envelope.
    """
    root = root_element(document)
    if root is None:
        return None
    return root.find("Items", recursive=False)
