"""Component sources for the Tessera environment.

Sources resolve a component URI to a ``ComponentDefinition`` (manifest,
template, optional script). They implement ``load(uri, options)``, either
as a plain method or as a coroutine; the environment awaits the result when
it is awaitable.

Built-in Sources:
- `FileSystemSource`: One directory per component under search paths
- `DictSource`: In-memory mapping (testing/embedded)
- `ChoiceSource`: Try multiple sources in order (theme fallback)
- `FunctionSource`: Wrap a callable as a source (quick one-offs)

Custom Sources:
Implement the ComponentSource protocol:
    ```python
    class DatabaseSource:
        async def load(self, uri: str, options: LoadOptions) -> ComponentDefinition:
            row = await db.fetch_one("SELECT * FROM components WHERE uri = ?", uri)
            if row is None:
                raise ComponentNotFoundError(uri)
            return ComponentDefinition.from_entry(uri, dict(row), f"db://{uri}")
    ```

Thread-Safety:
Built-in sources hold no mutable state; concurrent ``load()`` calls are safe.

"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from tessera.environment.exceptions import ComponentNotFoundError, ManifestError
from tessera.manifest import ComponentDefinition, ComponentSettings
from tessera.utils.awaitables import maybe_await

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadOptions:
    """Per-render options forwarded to the source.

    Attributes:
        base_directory_override: Search root replacing the source's own paths
        caching_enabled: Whether loaded definitions may be memoized
    """

    base_directory_override: str | Path | None = None
    caching_enabled: bool = True

    @property
    def cache_key(self) -> str | None:
        if self.base_directory_override is None:
            return None
        return str(self.base_directory_override)


class ComponentSource(Protocol):
    """Anything that can resolve a URI to a component definition."""

    def load(
        self, uri: str, options: LoadOptions
    ) -> ComponentDefinition | Awaitable[ComponentDefinition]: ...


class FileSystemSource:
    """Load components from directories on disk.

    Each URI names a directory (relative to a search path) holding the
    component's files:

        components/
          widgets/button/
            settings.json    # required
            template.html    # required
            script.js        # optional

    Search Order:
        Directories are searched in order and the first one holding the
        URI's manifest wins. A ``base_directory_override`` in the load
        options replaces the search paths for that load.

    Example:
            >>> source = FileSystemSource(["site/components", "shared/components"])
            >>> definition = source.load("widgets/button", LoadOptions())
            >>> definition.filename
            'site/components/widgets/button/settings.json'

    Raises:
        ComponentNotFoundError: If no search path holds the manifest, or the
            component directory has no template
        ManifestError: If the manifest is not valid JSON or has the wrong shape,
            or a component file cannot be decoded

    """

    __slots__ = ("_encoding", "_paths", "_script_name", "_settings_name", "_template_name")

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        *,
        settings_name: str = "settings.json",
        template_name: str = "template.html",
        script_name: str = "script.js",
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._settings_name = settings_name
        self._template_name = template_name
        self._script_name = script_name
        self._encoding = encoding

    def _read(self, path: Path, uri: str) -> str:
        try:
            return path.read_text(self._encoding)
        except UnicodeDecodeError as exc:
            raise ManifestError(
                f"Cannot decode {path.name} as {self._encoding}: {exc.reason} at byte {exc.start}",
                uri=uri,
                filename=str(path),
            ) from exc

    def _search_paths(self, options: LoadOptions) -> list[Path]:
        if options.base_directory_override is not None:
            return [Path(options.base_directory_override)]
        return self._paths

    def load(self, uri: str, options: LoadOptions) -> ComponentDefinition:
        """Read the manifest, template and optional script of ``uri``."""
        search_paths = self._search_paths(options)
        for base in search_paths:
            directory = base / uri
            manifest_path = directory / self._settings_name
            if not manifest_path.is_file():
                continue

            filename = str(manifest_path)
            settings = ComponentSettings.from_json(
                self._read(manifest_path, uri), uri=uri, filename=filename
            )

            template_path = directory / self._template_name
            if not template_path.is_file():
                raise ComponentNotFoundError(
                    uri, f"Component '{uri}' has no {self._template_name} in {directory}"
                )
            template = self._read(template_path, uri)

            script_path = directory / self._script_name
            script = self._read(script_path, uri) if script_path.is_file() else None

            logger.debug("Loaded component %s from %s", uri, directory)
            return ComponentDefinition(
                uri=uri,
                settings=settings,
                template=template,
                script=script or None,
                filename=filename,
            )

        raise ComponentNotFoundError(
            uri,
            f"Component '{uri}' not found in: {', '.join(str(p) for p in search_paths)}",
        )

    def list_components(self) -> list[str]:
        """List the URIs of all component directories in the search paths."""
        components = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob(self._settings_name):
                    components.add(path.parent.relative_to(base).as_posix())
        return sorted(components)


class DictSource:
    """Load components from an in-memory dictionary.

    Maps URIs to entries. An entry is either a bare template string or a
    mapping with ``template`` and optional ``settings`` (mapping or JSON
    text) and ``script`` members. Useful for testing and embedded components.

    Note:
        The ``base_directory_override`` load option has no meaning here and
        is ignored.

    Example:
            >>> source = DictSource({
            ...     "layout": {
            ...         "settings": {"imports": {"ui-card": "card"}},
            ...         "template": "<main><ui-card title='Hi'></ui-card></main>",
            ...     },
            ...     "card": "<article><h2><slot name='title'></slot></h2></article>",
            ... })
            >>> env = Environment(source)
            >>> env.render("layout")
            '<!DOCTYPE html><html><head></head><body><main><article><h2>Hi</h2></article></main></body></html>'

    Raises:
        ComponentNotFoundError: If the URI is not in the mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, Any]):
        self._mapping = mapping

    def load(self, uri: str, options: LoadOptions) -> ComponentDefinition:
        if uri not in self._mapping:
            raise ComponentNotFoundError(uri, available=list(self._mapping.keys()))
        return ComponentDefinition.from_entry(uri, self._mapping[uri])

    def list_components(self) -> list[str]:
        return sorted(self._mapping.keys())


class ChoiceSource:
    """Try multiple sources in order, returning the first match.

    Any child source may be async, so ``load`` is a coroutine.

    Example:
            >>> custom = DictSource({"nav": "<nav>Custom</nav>"})
            >>> default = FileSystemSource("components/")
            >>> env = Environment(ChoiceSource([custom, default]))
            >>> env.render("nav")  # from custom

    Raises:
        ComponentNotFoundError: If no source can find the component

    """

    __slots__ = ("_sources",)

    def __init__(self, sources: list[ComponentSource]):
        self._sources = sources

    async def load(self, uri: str, options: LoadOptions) -> ComponentDefinition:
        """Try each source in order, return first match."""
        for source in self._sources:
            try:
                return await maybe_await(source.load(uri, options))
            except ComponentNotFoundError:
                continue
        raise ComponentNotFoundError(
            uri, f"Component '{uri}' not found in any of {len(self._sources)} sources"
        )

    def list_components(self) -> list[str]:
        """Merge component lists from all sources (deduplicated, sorted)."""
        components: set[str] = set()
        for source in self._sources:
            if hasattr(source, "list_components"):
                components.update(source.list_components())
        return sorted(components)


class FunctionSource:
    """Wrap a callable as a component source.

    The callable receives the URI and may return:
        - ``None``: component not found
        - ``str``: a bare template
        - a mapping entry (see ``DictSource``) or a ``ComponentDefinition``

    It may also be a coroutine function returning any of the above.

    Example:
            >>> def load(uri):
            ...     if uri == "greeting":
            ...         return "<p>Hello, <slot name='name'>World</slot>!</p>"
            ...     return None
            >>> env = Environment(FunctionSource(load))
            >>> env.render("greeting", {"name": "Ada"})

    Raises:
        ComponentNotFoundError: If the callable returns ``None``

    """

    __slots__ = ("_load_func",)

    def __init__(self, load_func: Callable[[str], Any]):
        self._load_func = load_func

    async def load(self, uri: str, options: LoadOptions) -> ComponentDefinition:
        """Call the load function and normalize the result."""
        result = await maybe_await(self._load_func(uri))
        if result is None:
            raise ComponentNotFoundError(uri)
        return ComponentDefinition.from_entry(uri, result, f"<function:{uri}>")

    def list_components(self) -> list[str]:
        """FunctionSource cannot enumerate components."""
        return []
