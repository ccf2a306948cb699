"""Core Environment class for Tessera.

The Environment is the central configuration object. It owns the component
source, both caches and the plugins, and is the entry point for rendering.

Example:
    >>> from tessera import Environment, FileSystemSource
    >>> env = Environment(FileSystemSource("components/"))
    >>> html = env.render("pages/home", {"title": "Welcome"})

"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tessera.cache import ComponentCache, RenderCache
from tessera.environment.sources import ComponentSource, LoadOptions
from tessera.manifest import ComponentDefinition
from tessera.plugins.scripts import PassthroughCompiler, ScriptCompiler
from tessera.plugins.styles import StyleGenerator, UtilityStyleGenerator
from tessera.render_context import RenderSession
from tessera.renderer import Renderer
from tessera.utils.awaitables import maybe_await

logger = logging.getLogger(__name__)


@dataclass
class Environment:
    """Central configuration and render entry point.

    Attributes:
        source: Component source resolving URIs to definitions
        cache_renders: Memoize render results by fingerprint
        cache_components: Memoize loaded definitions (the default
            ``caching_enabled`` load option)
        base_directory: Default ``base_directory_override`` for loads
        style_generator: Utility stylesheet generator (None disables styles)
        script_compiler: Enhancement-script compiler (None disables scripts)
        style_plugin: Manifest plugin key enabling stylesheet generation
        interpolate: Run the mustache pre-pass over template sources
        max_import_depth: Maximum nesting of imports before ImportDepthError

    Caching:
        Render results are keyed by URI and a fingerprint of data, manifest,
        template and script. Entries live until ``clear_caches()``; edit a
        component on disk and clear the caches to pick the change up.

    Thread-Safety:
        Renders share no mutable state besides the caches, which only ever
        insert-if-absent. Concurrent ``render_async`` calls are safe.

    Example:
            >>> env = Environment(DictSource({"hello": "<p>Hello, <slot name='name'>you</slot></p>"}))
            >>> env.render("hello", {"name": "Ada"})
            '<!DOCTYPE html><html><head></head><body><p>Hello, Ada</p></body></html>'
    """

    source: ComponentSource
    cache_renders: bool = True
    cache_components: bool = True
    base_directory: str | Path | None = None
    style_generator: StyleGenerator | None = field(default_factory=UtilityStyleGenerator)
    script_compiler: ScriptCompiler | None = field(default_factory=PassthroughCompiler)
    style_plugin: str = "utilities"
    interpolate: bool = True
    max_import_depth: int = 50

    _render_cache: RenderCache = field(init=False, repr=False)
    _component_cache: ComponentCache = field(init=False, repr=False)
    _renderer: Renderer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_import_depth < 1:
            raise ValueError("max_import_depth must be at least 1")
        self._render_cache = RenderCache(enabled=self.cache_renders)
        self._component_cache = ComponentCache()
        self._renderer = Renderer(
            self.load_component,
            self._render_cache,
            style_generator=self.style_generator,
            script_compiler=self.script_compiler,
            style_plugin=self.style_plugin,
            interpolate=self.interpolate,
        )

    @property
    def load_options(self) -> LoadOptions:
        """Default load options for renders that pass none."""
        return LoadOptions(
            base_directory_override=self.base_directory,
            caching_enabled=self.cache_components,
        )

    async def load_component(self, uri: str, options: LoadOptions | None = None) -> ComponentDefinition:
        """Load a component definition, consulting the component cache.

        Raises:
            ComponentNotFoundError: If the source cannot find the component
            ManifestError: If the manifest is malformed
        """
        options = options or self.load_options
        key = (uri, options.cache_key)
        if options.caching_enabled:
            cached = self._component_cache.get(key)
            if cached is not None:
                return cached

        definition = await maybe_await(self.source.load(uri, options))
        if not isinstance(definition, ComponentDefinition):
            raise TypeError(
                f"{type(self.source).__name__}.load() returned {type(definition).__name__}, "
                "expected ComponentDefinition"
            )
        if options.caching_enabled:
            definition = self._component_cache.store(key, definition)
        return definition

    async def render_async(
        self,
        uri: str,
        data: Mapping[str, Any] | None = None,
        *,
        options: LoadOptions | None = None,
    ) -> str:
        """Render ``uri`` as a complete HTML document.

        Args:
            uri: Root component URI
            data: Custom data merged over the component's default data
            options: Load options (defaults to ``load_options``)

        Returns:
            The serialized document.

        Raises:
            ComponentNotFoundError: If a component in the tree cannot be found
            ManifestError: If a manifest, directive or payload is malformed
            CyclicImportError: If the import tree loops
            ImportDepthError: If imports nest deeper than ``max_import_depth``
        """
        if data is not None and not isinstance(data, Mapping):
            raise TypeError(f"data must be a mapping, got {type(data).__name__}")
        session = RenderSession.for_root(
            uri, options or self.load_options, max_depth=self.max_import_depth
        )
        logger.debug("Rendering %s", uri)
        result = await self._renderer.render(uri, data, session)
        return result.markup

    def render(
        self,
        uri: str,
        data: Mapping[str, Any] | None = None,
        *,
        options: LoadOptions | None = None,
    ) -> str:
        """Synchronous ``render_async``.

        Runs its own event loop, so it cannot be called from a coroutine;
        use ``await env.render_async(...)`` there.
        """
        return asyncio.run(self.render_async(uri, data, options=options))

    def cache_info(self) -> dict[str, Any]:
        """Hit/miss statistics and sizes of both caches.

        Example:
            >>> env.cache_info()
            {'renders': {'hits': 3, 'misses': 2, 'size': 2, 'enabled': True},
             'components': {'hits': 4, 'misses': 2, 'size': 2}}
        """
        return {
            "renders": {
                **self._render_cache.stats,
                "size": len(self._render_cache),
                "enabled": self._render_cache.enabled,
            },
            "components": {
                **self._component_cache.stats,
                "size": len(self._component_cache),
            },
        }

    def clear_caches(self) -> None:
        """Drop every cached render and component definition."""
        self._render_cache.clear()
        self._component_cache.clear()
