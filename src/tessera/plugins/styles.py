"""Utility-class stylesheet generation.

A root component opts in by declaring the style plugin in its manifest:

    ```json
    "plugins": {
      "utilities": {
        "utilities": {"p-4": "padding: 1rem", "text-center": {"textAlign": "center"}},
        "screens": {"md": "(min-width: 768px)"}
      }
    }
    ```

``UtilityStyleGenerator`` scans the resolved document for class names and
emits one rule per known utility actually used, in first-use order. A class
prefixed with a screen name (``md:p-4``) emits the same declarations inside
that screen's media query.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Mapping
from typing import Any, Protocol

from tessera import markup
from tessera.data import collapse_style, expand_style
from tessera.environment.exceptions import StyleGenerationError

_SELECTOR_SPECIAL = re.compile(r"([^A-Za-z0-9_-])")


class StyleGenerator(Protocol):
    """Produces a stylesheet for a fully resolved document."""

    def generate(self, markup: str, config: Any) -> str | Awaitable[str]: ...


def escape_class(name: str) -> str:
    """Escape a class name for use in a selector (``md:p-4`` → ``md\\:p-4``)."""
    return _SELECTOR_SPECIAL.sub(r"\\\1", name)


def used_classes(source: str) -> list[str]:
    """Class names in ``source`` in first-use order, without duplicates."""
    seen: dict[str, None] = {}
    for element in markup.parse(source).find_all(class_=True):
        for name in element["class"].split():
            seen.setdefault(name, None)
    return list(seen)


def _mapping(config: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = config.get(key) or {}
    if not isinstance(value, Mapping):
        raise StyleGenerationError(f"Utility plugin member '{key}' must be an object")
    return value


class UtilityStyleGenerator:
    """Emit CSS for the utility classes a document uses.

    Example:
            >>> generator = UtilityStyleGenerator()
            >>> generator.generate(
            ...     '<p class="p-4 md:p-4">x</p>',
            ...     {"utilities": {"p-4": "padding: 1rem"}, "screens": {"md": "(min-width: 768px)"}},
            ... )
            '.p-4 { padding: 1rem; }\\n@media (min-width: 768px) {\\n  .md\\\\:p-4 { padding: 1rem; }\\n}'

    Raises:
        StyleGenerationError: If the plugin configuration has the wrong shape
    """

    def generate(self, markup: str, config: Any) -> str:
        if not isinstance(config, Mapping):
            raise StyleGenerationError("Utility plugin configuration must be an object")
        utilities = _mapping(config, "utilities")
        screens = _mapping(config, "screens")

        base_rules: list[str] = []
        screen_rules: dict[str, list[str]] = {screen: [] for screen in screens}
        for name in used_classes(markup):
            screen, sep, utility = name.partition(":")
            if sep and screen in screens:
                rules = screen_rules[screen]
            else:
                utility, rules = name, base_rules
            declarations = utilities.get(utility)
            if declarations is None:
                continue
            css = collapse_style(expand_style(declarations))
            if css:
                rules.append(f".{escape_class(name)} {{ {css}; }}")

        blocks = list(base_rules)
        for screen, rules in screen_rules.items():
            if rules:
                body = "\n".join(f"  {rule}" for rule in rules)
                blocks.append(f"@media {screens[screen]} {{\n{body}\n}}")
        return "\n".join(blocks)
