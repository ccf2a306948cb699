"""Per-component render pipeline.

One ``Renderer.render`` call handles one component URI:

    LOOKUP → MERGE_DATA → CACHE_CHECK ─ hit ─→ replay head, return
                               │
                             miss
                               ↓
    EVALUATE_DIRECTIVES → RESOLVE_IMPORTS → INJECT_ENHANCEMENT
        → INJECT_STYLES (root only) → SERIALIZE → CACHE_STORE

Root renders produce a whole document; a fragment template is wrapped in
``<!DOCTYPE html><html><head></head><body>...</body></html>``. Descendant
renders produce their body content only; their head-level elements are
lifted into the root ``<head>`` through the session.

Enhancement scripts are registered once per document in the root head as
``window.__tessera["<id>"] = function (data, element) {...}``; every render
of the component then appends a bootstrap script that calls it with the
render's data and the element preceding the bootstrap.

"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from bs4 import BeautifulSoup, Tag

from tessera import markup
from tessera.assets import HeadAssets
from tessera.cache import DESCENDANT_ROLE, ROOT_ROLE, RenderCache, RenderResult, fingerprint
from tessera.data import build_data_context, serialize_data
from tessera.directives import DirectiveEvaluator
from tessera.environment.exceptions import PluginError
from tessera.environment.sources import LoadOptions
from tessera.imports import ImportResolver
from tessera.interpolation import interpolate
from tessera.manifest import ComponentDefinition
from tessera.plugins.scripts import ScriptCompiler
from tessera.plugins.styles import StyleGenerator
from tessera.render_context import RenderSession
from tessera.utils.awaitables import maybe_await
from tessera.utils.constants import SCRIPT_ID_PREFIX, SCRIPT_REGISTRY, UTILITY_STYLE_ATTR

logger = logging.getLogger(__name__)

LoadCallback = Callable[[str, LoadOptions], Awaitable[ComponentDefinition]]


def script_id_for(uri: str) -> str:
    return SCRIPT_ID_PREFIX + hashlib.sha256(uri.encode("utf-8")).hexdigest()[:12]


def _script_json(data: Mapping[str, Any]) -> str:
    return serialize_data(data).replace("</", "<\\/")


def registration_script(script_id: str, compiled: str) -> str:
    return (
        f'<script id="{script_id}">'
        f"{SCRIPT_REGISTRY} = {SCRIPT_REGISTRY} || {{}};\n"
        f'{SCRIPT_REGISTRY}["{script_id}"] = function (data, element) {{\n{compiled}\n}};'
        "</script>"
    )


def bootstrap_script(script_id: str, data: Mapping[str, Any]) -> str:
    return (
        "<script>(function (script) {\n"
        '  document.addEventListener("DOMContentLoaded", function () {\n'
        f'    {SCRIPT_REGISTRY}["{script_id}"]({_script_json(data)}, script.previousElementSibling);\n'
        "  });\n"
        "})(document.currentScript);</script>"
    )


class Renderer:
    """Renders components recursively for an ``Environment``.

    Args:
        load: Coroutine returning the definition of a URI
        cache: Render cache owned by the environment
        style_generator: Utility stylesheet generator, or None to disable
        script_compiler: Enhancement-script compiler, or None to disable
        style_plugin: Manifest plugin key that enables stylesheet generation
        interpolate: Run the mustache pre-pass over template sources
    """

    __slots__ = (
        "_cache",
        "_compiled",
        "_interpolate",
        "_load",
        "_script_compiler",
        "_script_ids",
        "_style_generator",
        "_style_plugin",
    )

    def __init__(
        self,
        load: LoadCallback,
        cache: RenderCache,
        *,
        style_generator: StyleGenerator | None = None,
        script_compiler: ScriptCompiler | None = None,
        style_plugin: str = "utilities",
        interpolate: bool = True,
    ):
        self._load = load
        self._cache = cache
        self._style_generator = style_generator
        self._script_compiler = script_compiler
        self._style_plugin = style_plugin
        self._interpolate = interpolate
        self._script_ids: dict[str, str] = {}
        self._compiled: dict[tuple[str, str], str] = {}

    async def render(
        self, uri: str, custom_data: Mapping[str, Any] | None, session: RenderSession
    ) -> RenderResult:
        """Render ``uri`` for the frame ``session``."""
        definition = await self._load(uri, session.options)
        settings = definition.settings
        session.settings = settings

        data = build_data_context(settings.data, custom_data, settings.when)

        role = DESCENDANT_ROLE if session.is_descendant else ROOT_ROLE
        key = fingerprint(data, definition, role=role)
        cached = self._cache.get(uri, key) if key is not None else None
        if cached is not None:
            if session.is_descendant:
                session.lift(cached.head)
            return cached

        source = definition.template
        if self._interpolate:
            source = interpolate(source, data, uri=uri)
        soup = markup.parse(source)

        if session.is_descendant:
            container: Tag = soup
        else:
            head, container = markup.ensure_document(soup)
            session.attach_document(HeadAssets(head))

        DirectiveEvaluator(settings.import_tags).evaluate(soup, data)

        if session.is_descendant:
            session.lift(markup.serialize(element) for element in markup.extract_head(soup))

        await ImportResolver(settings.imports, self.render).resolve(soup, session)

        if not session.is_descendant:
            markup.unwrap_slots(soup)

        await self._inject_enhancement(definition, data, container, session)

        if not session.is_descendant:
            await self._inject_styles(definition, soup, session)

        result = RenderResult(markup.serialize(soup), tuple(session.lifted))
        if key is None:
            return result
        return self._cache.store(uri, key, result)

    # -- enhancement scripts ------------------------------------------------

    def _script_id(self, uri: str) -> str:
        script_id = self._script_ids.get(uri)
        if script_id is None:
            script_id = self._script_ids.setdefault(uri, script_id_for(uri))
        return script_id

    async def _compile(self, uri: str, script: str) -> str:
        key = (uri, script)
        compiled = self._compiled.get(key)
        if compiled is not None:
            return compiled
        compiled = await maybe_await(self._script_compiler.compile(script))
        return self._compiled.setdefault(key, compiled or "")

    async def _inject_enhancement(
        self,
        definition: ComponentDefinition,
        data: Mapping[str, Any],
        container: Tag,
        session: RenderSession,
    ) -> None:
        if not definition.script or self._script_compiler is None:
            return
        try:
            compiled = await self._compile(definition.uri, definition.script)
        except Exception as exc:
            logger.warning(
                "Skipping enhancement script of %s: %s",
                definition.uri,
                exc,
                exc_info=not isinstance(exc, PluginError),
            )
            return
        if not compiled:
            logger.debug("Enhancement script of %s compiled to nothing", definition.uri)
            return

        script_id = self._script_id(definition.uri)
        session.register_script(script_id, registration_script(script_id, compiled))
        for node in list(markup.parse(bootstrap_script(script_id, data)).contents):
            container.append(node.extract())

    # -- utility styles -----------------------------------------------------

    async def _inject_styles(
        self, definition: ComponentDefinition, soup: BeautifulSoup, session: RenderSession
    ) -> None:
        config = definition.settings.plugins.get(self._style_plugin)
        if config is None or self._style_generator is None or session.assets is None:
            return
        try:
            stylesheet = await maybe_await(self._style_generator.generate(markup.serialize(soup), config))
        except Exception as exc:
            logger.warning(
                "Skipping utility styles of %s: %s",
                definition.uri,
                exc,
                exc_info=not isinstance(exc, PluginError),
            )
            return
        if not stylesheet:
            return

        style = soup.new_tag("style", attrs={UTILITY_STYLE_ATTR: ""})
        style.string = stylesheet
        session.assets.head.append(style)
