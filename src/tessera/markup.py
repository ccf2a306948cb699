"""HTML tree helpers built on BeautifulSoup.

Every template is parsed with the stdlib-backed ``html.parser`` builder and
``multi_valued_attributes=None`` so attribute values (``class`` included)
stay plain strings and round-trip unchanged.

Serialization uses ``FORMATTER``:

- ``&``, ``<``, ``>`` and ``"`` are escaped, nothing else is turned into
  named entities
- void elements print as ``<br>``, never ``<br/>``
- valueless attributes print bare (``<input disabled>``)
- ``<script>`` and ``<style>`` contents are never escaped

"""

from __future__ import annotations

import copy
from collections.abc import Iterable

from bs4 import BeautifulSoup, Doctype, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import Comment, PageElement
from bs4.formatter import HTMLFormatter

from tessera.utils.constants import HEAD_TAGS, SLOT_TAG

PARSER = "html.parser"

FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)


def parse(source: str) -> BeautifulSoup:
    """Parse a template or a rendered fragment into a mutable tree."""
    return BeautifulSoup(source, PARSER, multi_valued_attributes=None)


def serialize(node: PageElement) -> str:
    """Serialize a soup, a tag or a text node."""
    if isinstance(node, Tag):
        return node.decode(formatter=FORMATTER)
    if isinstance(node, NavigableString):
        return node.output_ready(FORMATTER)
    return str(node)


def serialize_contents(node: Tag) -> str:
    """Serialize the children of ``node`` without the node itself."""
    return node.decode_contents(formatter=FORMATTER)


def clone(tag: Tag) -> Tag:
    """Deep copy of ``tag``, detached from any tree."""
    return copy.copy(tag)


def text_node(text: str) -> NavigableString:
    return NavigableString(text)


def is_blank(node: PageElement) -> bool:
    """True for whitespace-only text and comments."""
    if isinstance(node, Comment):
        return True
    return isinstance(node, NavigableString) and not node.strip()


def replace_with_nodes(target: PageElement, nodes: Iterable[PageElement]) -> None:
    """Replace ``target`` with ``nodes`` in order; no nodes removes it."""
    for node in list(nodes):
        target.insert_before(node)
    target.extract()


def unwrap_slots(root: Tag) -> None:
    """Replace every remaining ``<slot>`` with its fallback content."""
    for slot in root.find_all(SLOT_TAG):
        if not slot.decomposed and slot.parent is not None:
            slot.unwrap()


def ensure_document(soup: BeautifulSoup) -> tuple[Tag, Tag]:
    """Give ``soup`` a full document shape and return its ``(head, body)``.

    A fragment template such as ``<main>...</main>`` becomes
    ``<!DOCTYPE html><html><head></head><body><main>...</main></body></html>``.
    Existing ``<html>``, ``<head>`` and ``<body>`` elements are reused.
    """
    html = soup.find("html")
    if html is None:
        head = soup.find("head")
        body = soup.find("body")
        nodes = [node for node in list(soup.contents) if not isinstance(node, Doctype)]
        for node in nodes:
            node.extract()
        html = soup.new_tag("html")
        head = head if head is not None else soup.new_tag("head")
        body = body if body is not None else soup.new_tag("body")
        html.append(head)
        html.append(body)
        for node in nodes:
            if node is head or node is body:
                continue
            body.append(node)
        soup.append(html)
    else:
        head = html.find("head", recursive=False)
        body = html.find("body", recursive=False)
        if body is None:
            body = soup.new_tag("body")
            for node in list(html.contents):
                if node is not head:
                    body.append(node)
            html.append(body)
        if head is None:
            head = soup.new_tag("head")
            html.insert(0, head)

    if not any(isinstance(node, Doctype) for node in soup.contents):
        soup.insert(0, Doctype("html"))
    return head, body


def extract_head(soup: BeautifulSoup) -> list[Tag]:
    """Pull head-level content out of a rendered fragment.

    Returns the children of a ``<head>`` element followed by top-level
    ``base``/``link``/``meta``/``script``/``style``/``title`` elements, in
    document order. Document scaffolding (doctype, ``<html>``, ``<head>``,
    ``<body>``) is removed so only body content remains in ``soup``.
    """
    for node in list(soup.contents):
        if isinstance(node, Doctype):
            node.extract()

    html = soup.find("html", recursive=False)
    if html is not None:
        html.unwrap()

    lifted: list[Tag] = []
    head = soup.find("head", recursive=False)
    if head is not None:
        lifted.extend(child for child in list(head.contents) if isinstance(child, Tag))
        for child in lifted:
            child.extract()
        head.decompose()

    body = soup.find("body", recursive=False)
    if body is not None:
        body.unwrap()

    for node in list(soup.contents):
        if isinstance(node, Tag) and node.name in HEAD_TAGS:
            lifted.append(node.extract())
    return lifted
