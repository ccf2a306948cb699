"""Head-asset lifting for the root document.

Imported components can carry head content (stylesheets, scripts, inline
styles, meta tags). ``HeadAssets`` owns the root ``<head>`` for one render
and appends lifted elements to it, deduplicating assets:

- ``<link>`` by ``href``
- ``<script>`` by ``id``, else ``src``, else its text
- ``<style>`` by its text

Anything else (``<meta>``, ``<title>``, ``<base>``, assets without a key) is
appended every time it is lifted.

"""

from __future__ import annotations

from collections.abc import Iterable

from bs4 import NavigableString, Tag

from tessera import markup
from tessera.utils.constants import ASSET_TAGS


def _text(element: Tag) -> str:
    return "".join(str(child) for child in element.contents if isinstance(child, NavigableString)).strip()


def asset_key(element: Tag) -> tuple[str, str] | None:
    """Deduplication key of a head element, or None when it has none."""
    if element.name not in ASSET_TAGS:
        return None
    if element.name == "link":
        href = element.get("href")
        return ("link", href) if href else None
    if element.name == "script":
        if element.get("id"):
            return ("script#id", element["id"])
        if element.get("src"):
            return ("script", element["src"])
        text = _text(element)
        return ("script", text) if text else None
    text = _text(element)
    return ("style", text) if text else None


class HeadAssets:
    """Deduplicating writer for the root document's ``<head>``."""

    __slots__ = ("_head", "_keys")

    def __init__(self, head: Tag):
        self._head = head
        self._keys: set[tuple[str, str]] = set()
        for element in head.find_all(True, recursive=False):
            key = asset_key(element)
            if key is not None:
                self._keys.add(key)

    @property
    def head(self) -> Tag:
        return self._head

    def has_script(self, script_id: str) -> bool:
        return ("script#id", script_id) in self._keys

    def add(self, element: Tag) -> bool:
        """Append ``element`` unless an equivalent asset is present.

        Returns True when the element was appended.
        """
        key = asset_key(element)
        if key is not None:
            if key in self._keys:
                return False
            self._keys.add(key)
        self._head.append(element)
        return True

    def lift(self, fragments: Iterable[str]) -> None:
        """Parse serialized head elements and add each of them."""
        for fragment in fragments:
            for node in list(markup.parse(fragment).contents):
                if isinstance(node, Tag):
                    self.add(node.extract())
