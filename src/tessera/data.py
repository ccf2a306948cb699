"""Data-context helpers: dotted-path lookup, truthiness and data assembly.

Component data is plain JSON-like Python data (None, bool, int/float, str,
list, dict). Every directive reads it through ``resolve_path`` and judges it
with ``is_truthy``, so the lookup and truthiness rules live in one place:

- A path that does not resolve yields ``UNDEFINED``, never an exception.
- Falsy values: ``UNDEFINED``, ``None``, ``False``, ``0``, ``0.0``, ``NaN``
  and ``""``. Empty lists and mappings are truthy.

Data assembly for one render (``build_data_context``):

1. deep copy of the manifest's ``data``
2. caller data merged over it (shallow)
3. ``when`` overrides whose condition holds on the merged data
4. style shorthand: a ``style`` mapping collapses to inline CSS text

Thread-Safety:
All functions are pure; inputs are never mutated.

"""

from __future__ import annotations

import copy
import json
import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from tessera.utils.constants import NEGATION_PREFIX

STYLE_KEY = "style"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


class _Undefined:
    """Sentinel for a dotted path that did not resolve."""

    __slots__ = ()
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Undefined:
        return self


UNDEFINED = _Undefined()


# ---------------------------------------------------------------------------
# Lookup and truthiness
# ---------------------------------------------------------------------------


def _step(current: Any, segment: str) -> Any:
    if current is None or current is UNDEFINED:
        return UNDEFINED
    if isinstance(current, Mapping):
        return current.get(segment, UNDEFINED)
    if isinstance(current, (str, list, tuple)):
        if segment == "length":
            return len(current)
        if isinstance(current, str):
            return UNDEFINED
        if segment.isdigit():
            index = int(segment)
            return current[index] if index < len(current) else UNDEFINED
        return UNDEFINED
    if segment.startswith("_") or isinstance(current, (int, float, bool)):
        return UNDEFINED
    return getattr(current, segment, UNDEFINED)


def resolve_path(data: Any, path: str) -> Any:
    """Resolve a dotted path such as ``user.address.city`` or ``items.0``.

    Mapping keys, list indices and a ``length`` pseudo-property on lists and
    strings are supported; other objects are read by attribute (public names
    only).

    Args:
        data: Root data context
        path: Dotted path, surrounding whitespace ignored

    Returns:
        The resolved value, or ``UNDEFINED`` when any segment is missing.

    Example:
        >>> resolve_path({"user": {"tags": ["a", "b"]}}, "user.tags.length")
        2
        >>> resolve_path({"user": None}, "user.name")
        UNDEFINED
    """
    path = path.strip()
    if not path:
        return UNDEFINED
    current = data
    for segment in path.split("."):
        current = _step(current, segment)
        if current is UNDEFINED:
            return UNDEFINED
    return current


def is_truthy(value: Any) -> bool:
    """Loose truthiness shared by ``use-if``, ``:attr`` and ``when``."""
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def is_present(value: Any) -> bool:
    """Presence check used for slot defaulting (not truthiness)."""
    return value is not None and value is not UNDEFINED


def split_negation(expression: str) -> tuple[bool, str]:
    """Split an optional leading ``!`` from a path expression."""
    expression = expression.strip()
    if expression.startswith(NEGATION_PREFIX):
        return True, expression[len(NEGATION_PREFIX):].strip()
    return False, expression


def evaluate(data: Any, expression: str) -> Any:
    """Resolve ``path`` or ``!path``; negation yields a bool."""
    negated, path = split_negation(expression)
    value = resolve_path(data, path)
    if negated:
        return not is_truthy(value)
    return value


def iter_collection(value: Any) -> list[Any]:
    """Items to repeat over; anything that is not a sequence-like iterable is empty."""
    if value is UNDEFINED or value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)):
        return []
    if isinstance(value, Iterable):
        return list(value)
    return []


# ---------------------------------------------------------------------------
# Text and JSON conversion
# ---------------------------------------------------------------------------


def to_text(value: Any) -> str:
    """Convert a data value to attribute or text content."""
    if value is None or value is UNDEFINED:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (Mapping, list, tuple)):
        return to_json(value)
    return str(value)


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key)
    return str(key)


def _string_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {_json_key(key): _string_keys(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_string_keys(item) for item in value]
    return value


def serialize_data(data: Mapping[str, Any]) -> str:
    """Deterministic JSON for bootstrap scripts.

    Mapping keys are converted to strings the way JSON does (``1`` becomes
    ``"1"``, ``True`` becomes ``"true"``) before sorting, so keys of mixed
    types never have to be compared with each other.
    """
    return json.dumps(
        _string_keys(data), sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str
    )


class NotPlainDataError(TypeError):
    """A value is not plain JSON-like data and has no canonical encoding."""


def canonical_data(value: Any) -> Any:
    """Lossless, order-independent encoding of plain data.

    Scalars are tagged with their type and mapping keys keep theirs, so
    ``1``, ``1.0``, ``True`` and ``"1"`` all encode differently. Mappings
    become key-sorted pair lists; tuples encode like lists.

    Raises:
        NotPlainDataError: For any value that is not None, bool, int, float,
            str, a list or tuple of plain data, or a mapping with scalar keys
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return [type(value).__name__, value]
    if isinstance(value, (list, tuple)):
        return ["list", [canonical_data(item) for item in value]]
    if isinstance(value, Mapping):
        pairs = []
        for key, item in value.items():
            if not (key is None or isinstance(key, (bool, int, float, str))):
                raise NotPlainDataError(f"Mapping key {key!r} is not a plain scalar")
            pairs.append((json.dumps(canonical_data(key)), canonical_data(item)))
        pairs.sort(key=lambda pair: pair[0])
        return ["map", pairs]
    raise NotPlainDataError(f"{type(value).__name__} value is not plain data")


# ---------------------------------------------------------------------------
# Style shorthand
# ---------------------------------------------------------------------------


def _css_property(name: str) -> str:
    name = name.strip()
    if name.startswith("--"):
        return name
    return _CAMEL_BOUNDARY.sub(r"-\1", name).lower()


def expand_style(value: Any) -> dict[str, Any]:
    """Expand inline CSS text or a property mapping into ``{property: value}``.

    Example:
        >>> expand_style("color: red; fontSize: 2rem")
        {'color': 'red', 'font-size': '2rem'}
        >>> expand_style({"backgroundColor": "black"})
        {'background-color': 'black'}
    """
    if isinstance(value, Mapping):
        return {_css_property(str(key)): item for key, item in value.items()}
    if isinstance(value, str):
        expanded: dict[str, Any] = {}
        for declaration in value.split(";"):
            name, sep, item = declaration.partition(":")
            if sep and name.strip():
                expanded[_css_property(name)] = item.strip()
        return expanded
    return {}


def collapse_style(properties: Mapping[str, Any]) -> str:
    """Collapse a property mapping into inline CSS; empty values are dropped."""
    declarations = []
    for name, value in properties.items():
        if value is None or value is UNDEFINED or value is False or value == "":
            continue
        declarations.append(f"{_css_property(name)}: {to_text(value)}")
    return "; ".join(declarations)


# ---------------------------------------------------------------------------
# Data context assembly
# ---------------------------------------------------------------------------


def apply_when(data: dict[str, Any], when: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Overlay the overrides of every ``when`` condition that holds.

    Conditions are all judged against ``data`` as it was before any override
    applied, then applied in manifest order. ``style`` overrides merge into
    the style mapping instead of replacing it.

    Example:
        >>> apply_when(
        ...     {"dark": True, "style": {"color": "red"}},
        ...     {"dark": {"style": {"background": "black"}, "label": "Dark"}},
        ... )
        {'dark': True, 'style': {'color': 'red', 'background': 'black'}, 'label': 'Dark'}
    """
    active = [overrides for condition, overrides in when.items() if is_truthy(evaluate(data, condition))]
    for overrides in active:
        for key, value in overrides.items():
            if key == STYLE_KEY:
                data[STYLE_KEY] = {**expand_style(data.get(STYLE_KEY)), **expand_style(value)}
            else:
                data[key] = copy.deepcopy(value)
    return data


def build_data_context(
    defaults: Mapping[str, Any],
    custom_data: Mapping[str, Any] | None,
    when: Mapping[str, Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Assemble the data context for one render.

    Args:
        defaults: The manifest's ``data`` (never mutated)
        custom_data: Caller-supplied data merged over the defaults
        when: Conditional overrides from the manifest

    Returns:
        A fresh mapping owned by the caller.
    """
    data: dict[str, Any] = copy.deepcopy(dict(defaults))
    if custom_data:
        data.update(custom_data)
    if when:
        apply_when(data, when)
    style = data.get(STYLE_KEY)
    if isinstance(style, Mapping):
        data[STYLE_KEY] = collapse_style(expand_style(style))
    return data
