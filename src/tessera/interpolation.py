"""Mustache pre-pass over template sources (chevron).

With interpolation enabled, a template is rendered through mustache with
the merged data context before it is parsed, so ``{{title}}``, sections
(``{{#items}}...{{/items}}``) and inverted sections work anywhere in the
markup, attribute values included. Values are HTML-escaped; ``{{{raw}}}``
is not. Missing names render as empty text.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import chevron
from chevron.tokenizer import ChevronError

from tessera.environment.exceptions import ManifestError

_OPEN_TAG = "{{"


def interpolate(source: str, data: Mapping[str, Any], *, uri: str | None = None) -> str:
    """Render ``source`` as a mustache template over ``data``.

    Raises:
        ManifestError: If the mustache markup is malformed (e.g. an unclosed section)
    """
    if _OPEN_TAG not in source:
        return source
    try:
        return chevron.render(source, dict(data))
    except ChevronError as exc:
        raise ManifestError(f"Invalid mustache markup: {exc}", uri=uri) from exc
