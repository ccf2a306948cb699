"""Render and component-load caches.

Both caches are plain nested dicts written with ``dict.setdefault``
(insert-if-absent): when two concurrent renders compute the same entry, the
first stored value wins and the other render returns it. Entries are never
mutated after insertion and never expire; ``clear()`` is the only
invalidation.

Render-cache keys are fingerprints of everything that determines output:

- the data context in canonical form (type-tagged, key-sorted)
- the manifest (imports, plugins, when)
- the template and script sources
- the render role (root renders emit a document, descendants a fragment)

Data that is not plain JSON-like data (objects read by attribute, for
instance) has no faithful encoding; such renders get no fingerprint and
bypass the render cache.

"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tessera.data import NotPlainDataError, canonical_data

if TYPE_CHECKING:
    from tessera.manifest import ComponentDefinition

logger = logging.getLogger(__name__)

ROOT_ROLE = "root"
DESCENDANT_ROLE = "descendant"


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Output of one component render.

    Attributes:
        markup: Serialized document (root) or body fragment (descendant)
        head: Serialized head elements this render contributed to the root
            ``<head>``, its descendants' contributions included. Replayed
            into the current document on a cache hit.
    """

    markup: str
    head: tuple[str, ...] = ()


def _canonical_json(value: Any) -> str:
    return json.dumps(canonical_data(value), ensure_ascii=False, separators=(",", ":"))


def fingerprint(data: dict[str, Any], definition: ComponentDefinition, *, role: str) -> str | None:
    """Deterministic hex digest identifying one render's output.

    Returns None when the data context or the manifest holds values that
    are not plain data; the render must then bypass the render cache.
    """
    settings = definition.settings.to_dict()
    del settings["data"]
    try:
        encoded_data = _canonical_json(data)
        encoded_settings = _canonical_json(settings)
    except NotPlainDataError as exc:
        logger.debug("No fingerprint for %s: %s", definition.uri, exc)
        return None
    parts = [
        role,
        encoded_data,
        encoded_settings,
        definition.template,
        definition.script or "",
    ]
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


class RenderCache:
    """Memoized render results keyed by URI, then fingerprint.

    Example:
            >>> cache = RenderCache()
            >>> cache.store("card", "ab12", RenderResult("<p>x</p>"))
            RenderResult(markup='<p>x</p>', head=())
            >>> cache.get("card", "ab12").markup
            '<p>x</p>'
            >>> cache.stats
            {'hits': 1, 'misses': 0}
    """

    __slots__ = ("_entries", "_stats", "enabled")

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._entries: dict[str, dict[str, RenderResult]] = {}
        self._stats = {"hits": 0, "misses": 0}

    def get(self, uri: str, key: str) -> RenderResult | None:
        if not self.enabled:
            return None
        result = self._entries.get(uri, {}).get(key)
        if result is None:
            self._stats["misses"] += 1
            logger.debug("Render cache miss for %s", uri)
        else:
            self._stats["hits"] += 1
            logger.debug("Render cache hit for %s", uri)
        return result

    def store(self, uri: str, key: str, result: RenderResult) -> RenderResult:
        """Insert ``result`` unless an entry exists; return the stored entry."""
        if not self.enabled:
            return result
        return self._entries.setdefault(uri, {}).setdefault(key, result)

    def clear(self, uri: str | None = None) -> None:
        if uri is None:
            self._entries.clear()
        else:
            self._entries.pop(uri, None)
        self._stats["hits"] = 0
        self._stats["misses"] = 0

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __contains__(self, uri: object) -> bool:
        return uri in self._entries


class ComponentCache:
    """Loaded component definitions keyed by ``(uri, base_directory_override)``."""

    __slots__ = ("_entries", "_stats")

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str | None], ComponentDefinition] = {}
        self._stats = {"hits": 0, "misses": 0}

    def get(self, key: tuple[str, str | None]) -> ComponentDefinition | None:
        definition = self._entries.get(key)
        if definition is None:
            self._stats["misses"] += 1
        else:
            self._stats["hits"] += 1
        return definition

    def store(self, key: tuple[str, str | None], definition: ComponentDefinition) -> ComponentDefinition:
        return self._entries.setdefault(key, definition)

    def clear(self) -> None:
        self._entries.clear()
        self._stats["hits"] = 0
        self._stats["misses"] = 0

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    def __len__(self) -> int:
        return len(self._entries)
