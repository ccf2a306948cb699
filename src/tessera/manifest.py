"""Component definitions and manifest validation.

A component is three pieces of text addressed by a URI:

- ``settings`` (the manifest): JSON object with optional ``data``,
  ``imports``, ``plugins`` and ``when`` members
- ``template``: HTML with directives, slots and import placeholders
- ``script``: optional enhancement script

Manifest shape:
    ```json
    {
      "data": {"label": "Save"},
      "imports": {"ui-icon": "widgets/icon"},
      "plugins": {"utilities": {"utilities": {"p-4": "padding: 1rem"}}},
      "when": {"primary": {"style": {"background": "blue"}}}
    }
    ```

Import tag names are case-insensitive; they are stored lowercased because
the HTML parser lowercases element names.

"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tessera.environment.exceptions import ManifestError


def _require_mapping(raw: Mapping[str, Any], key: str, uri: str | None, filename: str | None) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ManifestError(
            f"Manifest member '{key}' must be an object, got {type(value).__name__}",
            uri=uri,
            filename=filename,
        )
    return value


@dataclass(frozen=True, slots=True)
class ComponentSettings:
    """Validated manifest of one component.

    Attributes:
        data: Default data context
        imports: Lowercased tag name → child component URI
        plugins: Plugin name → opaque plugin configuration
        when: Condition expression → data overrides
    """

    data: Mapping[str, Any] = field(default_factory=dict)
    imports: Mapping[str, str] = field(default_factory=dict)
    plugins: Mapping[str, Any] = field(default_factory=dict)
    when: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    @property
    def import_tags(self) -> frozenset[str]:
        return frozenset(self.imports)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": dict(self.data),
            "imports": dict(self.imports),
            "plugins": dict(self.plugins),
            "when": {key: dict(value) for key, value in self.when.items()},
        }

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any] | None,
        *,
        uri: str | None = None,
        filename: str | None = None,
    ) -> ComponentSettings:
        """Validate a decoded manifest.

        Raises:
            ManifestError: If the manifest or one of its members has the wrong shape
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ManifestError(
                f"Manifest must be a JSON object, got {type(raw).__name__}",
                uri=uri,
                filename=filename,
            )

        data = _require_mapping(raw, "data", uri, filename)
        plugins = _require_mapping(raw, "plugins", uri, filename)

        imports: dict[str, str] = {}
        for tag, target in _require_mapping(raw, "imports", uri, filename).items():
            key = str(tag).strip().lower()
            if not key:
                raise ManifestError("Import tag names must not be empty", uri=uri, filename=filename)
            if key in imports:
                raise ManifestError(
                    f"Duplicate import tag '{key}' (tag names are case-insensitive)",
                    uri=uri,
                    filename=filename,
                )
            imports[key] = str(target)

        when: dict[str, Mapping[str, Any]] = {}
        for condition, overrides in _require_mapping(raw, "when", uri, filename).items():
            if not isinstance(overrides, Mapping):
                raise ManifestError(
                    f"Overrides for when-condition '{condition}' must be an object",
                    uri=uri,
                    filename=filename,
                )
            when[str(condition)] = overrides

        return cls(data=dict(data), imports=imports, plugins=dict(plugins), when=when)

    @classmethod
    def from_json(cls, text: str, *, uri: str | None = None, filename: str | None = None) -> ComponentSettings:
        """Decode and validate manifest text."""
        try:
            raw = json.loads(text) if text.strip() else None
        except json.JSONDecodeError as exc:
            raise ManifestError(
                f"Invalid manifest JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})",
                uri=uri,
                filename=filename,
            ) from exc
        return cls.from_mapping(raw, uri=uri, filename=filename)


@dataclass(frozen=True, slots=True)
class ComponentDefinition:
    """A loaded component, immutable once loaded.

    Attributes:
        uri: Opaque component identifier
        settings: Validated manifest
        template: Template markup
        script: Enhancement script source, if any
        filename: Where the component came from (for error messages)
    """

    uri: str
    settings: ComponentSettings
    template: str
    script: str | None = None
    filename: str | None = None

    @classmethod
    def from_entry(cls, uri: str, entry: Any, filename: str | None = None) -> ComponentDefinition:
        """Build a definition from an in-memory entry.

        ``entry`` may be a ``ComponentDefinition``, a bare template string,
        or a mapping with ``template`` and optional ``settings`` (mapping or
        JSON text) and ``script`` members.
        """
        if isinstance(entry, ComponentDefinition):
            return entry
        if isinstance(entry, str):
            return cls(uri=uri, settings=ComponentSettings(), template=entry, filename=filename)
        if not isinstance(entry, Mapping):
            raise ManifestError(
                f"Component entry must be a template string or a mapping, got {type(entry).__name__}",
                uri=uri,
                filename=filename,
            )

        template = entry.get("template")
        if not isinstance(template, str):
            raise ManifestError("Component entry has no template", uri=uri, filename=filename)

        raw_settings = entry.get("settings")
        if isinstance(raw_settings, str):
            settings = ComponentSettings.from_json(raw_settings, uri=uri, filename=filename)
        else:
            settings = ComponentSettings.from_mapping(raw_settings, uri=uri, filename=filename)

        script = entry.get("script")
        if script is not None and not isinstance(script, str):
            raise ManifestError("Component script must be a string", uri=uri, filename=filename)

        return cls(uri=uri, settings=settings, template=template, script=script or None, filename=filename)
