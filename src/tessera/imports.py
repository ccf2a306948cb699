"""Import resolution: expands import placeholders into rendered children.

For every element whose tag is in the component's import table:

1. its own children are resolved first (they belong to the caller's scope)
2. its attributes become the child's custom data
3. the child is rendered as a descendant through the render callback
4. caller children are projected into the child's slots
5. the placeholder is replaced by the child's nodes

Slot projection:

- ``<slot name="x">`` receives the caller's direct child element carrying
  ``slot="x"``
- ``<slot>`` (or ``<slot name="children">``) receives every other caller
  child node, in order
- a slot that receives nothing is replaced by its fallback content

Spliced child content is not scanned again with the caller's import table;
the child already resolved its own imports.

"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup, Tag

from tessera import markup
from tessera.environment.exceptions import PayloadError
from tessera.utils.constants import (
    BOUND_JSON_ATTR,
    DEFAULT_SLOT_ALIAS,
    SLOT_NAME_ATTR,
    SLOT_TAG,
    SLOT_TARGET_ATTR,
)

if TYPE_CHECKING:
    from tessera.cache import RenderResult
    from tessera.render_context import RenderSession

logger = logging.getLogger(__name__)

RenderCallback = Callable[[str, dict[str, Any], "RenderSession"], Awaitable["RenderResult"]]


def collect_payload(element: Tag, *, uri: str | None = None) -> dict[str, Any]:
    """Turn a placeholder's attributes into custom data for the child.

    Attributes listed in the JSON marker are decoded; all others pass
    through as strings.

    Raises:
        PayloadError: If a marked attribute does not hold valid JSON
    """
    encoded = set(element.attrs.get(BOUND_JSON_ATTR, "").split())
    payload: dict[str, Any] = {}
    for name, value in element.attrs.items():
        if name == BOUND_JSON_ATTR:
            continue
        if name in encoded:
            try:
                payload[name] = json.loads(value)
            except json.JSONDecodeError as exc:
                raise PayloadError(
                    f"Attribute '{name}' of <{element.name}> is not valid JSON: {exc.msg}",
                    uri=uri,
                ) from exc
        else:
            payload[name] = value
    return payload


def _is_default_slot(slot: Tag) -> bool:
    name = slot.get(SLOT_NAME_ATTR)
    return not name or name == DEFAULT_SLOT_ALIAS


def project_slots(fragment: BeautifulSoup, caller: Tag) -> None:
    """Move the caller's children into the slots of a rendered child fragment."""
    slots = fragment.find_all(SLOT_TAG)
    if not slots:
        return

    caller_nodes = list(caller.contents)
    named: dict[str, Tag] = {}
    for node in caller_nodes:
        if isinstance(node, Tag) and node.get(SLOT_TARGET_ATTR):
            named.setdefault(node[SLOT_TARGET_ATTR], node)

    slot_names = {slot[SLOT_NAME_ATTR] for slot in slots if not _is_default_slot(slot)}
    assigned = {id(named[name]) for name in slot_names if name in named}
    remaining = [node for node in caller_nodes if id(node) not in assigned]
    if all(markup.is_blank(node) for node in remaining):
        remaining = []

    default_filled = False
    for slot in slots:
        if slot.decomposed:
            continue
        if _is_default_slot(slot):
            if remaining and not default_filled:
                markup.replace_with_nodes(slot, remaining)
                slot.decompose()
                default_filled = True
            else:
                slot.unwrap()
            continue

        target = named.pop(slot[SLOT_NAME_ATTR], None)
        if target is None:
            slot.unwrap()
        else:
            slot.replace_with(target.extract())
            slot.decompose()


class ImportResolver:
    """Replaces import placeholders with rendered child components.

    Args:
        imports: Tag name → child URI (keys matched case-insensitively)
        render: Callback rendering a child URI as a descendant
    """

    __slots__ = ("_imports", "_render")

    def __init__(self, imports: Mapping[str, str], render: RenderCallback):
        self._imports = {tag.lower(): uri for tag, uri in imports.items()}
        self._render = render

    async def resolve(self, root: Tag, session: RenderSession) -> None:
        if not self._imports:
            return
        await self._resolve_children(root, session)

    async def _resolve_children(self, parent: Tag, session: RenderSession) -> None:
        for child in list(parent.children):
            if not isinstance(child, Tag) or child.parent is not parent:
                continue
            await self._resolve_children(child, session)
            uri = self._imports.get(child.name.lower())
            if uri is not None:
                await self._expand(child, uri, session)

    async def _expand(self, element: Tag, uri: str, session: RenderSession) -> None:
        payload = collect_payload(element, uri=session.uri)
        child_session = session.child_session(uri)
        logger.debug("Importing %s into %s as <%s>", uri, session.uri, element.name)

        result = await self._render(uri, payload, child_session)
        session.record(result.head)

        fragment = markup.parse(result.markup)
        project_slots(fragment, element)
        markup.replace_with_nodes(element, list(fragment.contents))
        element.decompose()
