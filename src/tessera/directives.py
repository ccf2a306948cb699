"""Directive evaluation: binds a data context into a parsed template.

Directives:

- ``use-for="item in path"``: clone the element once per item
- ``use-if="path"`` / ``use-if="!path"``: keep or drop the element
- ``<slot name="path">``: replaced by the value's text when present
- ``:name="path"`` / ``:name="!path"``: computed attribute

Per element the order is repeat, conditional, slot, children, bound
attributes. The evaluator mutates the tree in place and leaves no directive
attribute behind.

Example:
    >>> soup = markup.parse('<ul><li use-for="n in nums" :data-n="n">x</li></ul>')
    >>> DirectiveEvaluator().evaluate(soup, {"nums": [1, 2]})
    >>> markup.serialize(soup)
    '<ul><li data-n="1">x</li><li data-n="2">x</li></ul>'

"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from bs4 import Tag

from tessera import markup
from tessera.data import evaluate, is_present, is_truthy, iter_collection, resolve_path, to_json, to_text
from tessera.environment.exceptions import DirectiveSyntaxError
from tessera.utils.constants import (
    BIND_PREFIX,
    BOUND_JSON_ATTR,
    CONDITION_ATTR,
    REPEAT_ATTR,
    SLOT_NAME_ATTR,
    SLOT_TAG,
)

_REPEAT_PATTERN = re.compile(r"^\s*([A-Za-z_$][\w$]*)\s+in\s+(\S+)\s*$")


def parse_repeat(expression: str) -> tuple[str, str]:
    """Split ``item in path`` into ``(item, path)``.

    Raises:
        DirectiveSyntaxError: If the expression is not of that form
    """
    match = _REPEAT_PATTERN.match(expression)
    if match is None:
        raise DirectiveSyntaxError(
            f"Invalid {REPEAT_ATTR} expression {expression!r} (expected 'item in collection')"
        )
    return match.group(1), match.group(2)


class DirectiveEvaluator:
    """Evaluates directives against a data context.

    Args:
        import_tags: Tag names of import placeholders. Bound attributes on
            these carry JSON so the import resolver can hand structured
            values to the child component.
    """

    __slots__ = ("_import_tags",)

    def __init__(self, import_tags: Iterable[str] = ()):
        self._import_tags = frozenset(tag.lower() for tag in import_tags)

    def evaluate(self, root: Tag, data: Mapping[str, Any]) -> None:
        self._evaluate_children(root, data)

    def _evaluate_children(self, parent: Tag, data: Mapping[str, Any]) -> None:
        for child in list(parent.children):
            if isinstance(child, Tag) and child.parent is parent:
                self._evaluate_element(child, data)

    def _evaluate_element(self, element: Tag, data: Mapping[str, Any]) -> None:
        if element.has_attr(REPEAT_ATTR):
            self._repeat(element, data)
            return

        if element.has_attr(CONDITION_ATTR):
            if not is_truthy(evaluate(data, element[CONDITION_ATTR])):
                element.decompose()
                return
            del element[CONDITION_ATTR]

        if element.name == SLOT_TAG and element.get(SLOT_NAME_ATTR):
            value = resolve_path(data, element[SLOT_NAME_ATTR])
            if is_present(value):
                element.replace_with(markup.text_node(to_text(value)))
                element.decompose()
                return

        self._evaluate_children(element, data)
        self._bind_attributes(element, data)

    def _repeat(self, element: Tag, data: Mapping[str, Any]) -> None:
        item_name, path = parse_repeat(element[REPEAT_ATTR])
        del element[REPEAT_ATTR]
        for item in iter_collection(resolve_path(data, path)):
            clone = markup.clone(element)
            element.insert_before(clone)
            self._evaluate_element(clone, {**data, item_name: item})
        element.decompose()

    def _bind_attributes(self, element: Tag, data: Mapping[str, Any]) -> None:
        bound = [name for name in element.attrs if name.startswith(BIND_PREFIX)]
        if not bound:
            return

        as_json = element.name in self._import_tags
        encoded: list[str] = []
        for name in bound:
            expression = element.attrs.pop(name)
            target = name[len(BIND_PREFIX):]
            if not target:
                continue
            value = evaluate(data, expression)
            if not is_truthy(value):
                element.attrs.pop(target, None)
                continue
            if as_json:
                element[target] = to_json(value)
                encoded.append(target)
            else:
                element[target] = to_text(value)

        if encoded:
            existing = element.get(BOUND_JSON_ATTR, "").split()
            element[BOUND_JSON_ATTR] = " ".join(dict.fromkeys([*existing, *encoded]))
