"""Shared constants for Tessera.

Directive vocabulary and the head-level element sets used when lifting
assets out of imported components.
"""

from __future__ import annotations

# Directive attributes recognised in component templates
REPEAT_ATTR = "use-for"
CONDITION_ATTR = "use-if"
BIND_PREFIX = ":"
NEGATION_PREFIX = "!"

# <slot name="..."> placeholders and the caller-side slot="..." attribute
SLOT_TAG = "slot"
SLOT_NAME_ATTR = "name"
SLOT_TARGET_ATTR = "slot"

# Slot name that also receives the caller's unassigned children
DEFAULT_SLOT_ALIAS = "children"

# Marker recording which attributes of an import placeholder hold JSON.
# Only ever set on import placeholders, which are replaced before output.
BOUND_JSON_ATTR = "tessera:json"

# Head children that count as assets for deduplication
ASSET_TAGS: frozenset[str] = frozenset({"link", "script", "style"})

# Top-level elements of an imported fragment that belong in <head>
HEAD_TAGS: frozenset[str] = frozenset({"base", "link", "meta", "script", "style", "title"})

# Attribute marking the generated utility stylesheet
UTILITY_STYLE_ATTR = "data-tessera-utilities"

# Prefix of per-component enhancement script ids
SCRIPT_ID_PREFIX = "tessera-"

# Browser-side registry the enhancement scripts attach to
SCRIPT_REGISTRY = "window.__tessera"
