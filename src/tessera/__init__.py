"""Tessera: server-side HTML component composition.

Tessera resolves a tree of declaratively defined components (a markup
template plus a JSON manifest each) into one self-contained HTML document.

Quickstart:
    >>> from tessera import DictSource, Environment
    >>> env = Environment(DictSource({
    ...     "page": {
    ...         "settings": {"imports": {"my-button": "button"}},
    ...         "template": "<main><my-button>Click</my-button></main>",
    ...     },
    ...     "button": "<button><slot></slot></button>",
    ... }))
    >>> env.render("page")
    '<!DOCTYPE html><html><head></head><body><main><button>Click</button></main></body></html>'

Components on disk:
    >>> from tessera import Environment, FileSystemSource
    >>> env = Environment(FileSystemSource("components/"))
    >>> html = env.render("pages/home", {"title": "Welcome"})

Pipeline (per component):
1. **Lookup**: the source returns manifest, template and optional script
2. **Data**: manifest data, caller data, ``when`` overrides, style shorthand
3. **Cache check**: identical fingerprint returns the memoized output
4. **Directives**: ``use-for``, ``use-if``, ``<slot name>``, ``:attr``
5. **Imports**: child components rendered recursively and spliced in,
   caller content projected into their slots, head assets lifted
6. **Enhancement**: compiled script registered once, bootstrapped per render
7. **Styles** (root only): utility stylesheet for the classes in use

Directives:
    <li use-for="item in items"><slot name="item.label"></slot></li>
    <p use-if="!hidden">visible</p>
    <a :href="link.url" :aria-current="active">...</a>

Async:
The pipeline is async; sources and plugins may be sync or async.

    >>> html = await env.render_async("pages/home")

"""

from tessera.cache import RenderResult
from tessera.data import UNDEFINED
from tessera.environment import (
    ChoiceSource,
    ComponentError,
    ComponentNotFoundError,
    ComponentRuntimeError,
    ComponentSource,
    CyclicImportError,
    DictSource,
    DirectiveSyntaxError,
    Environment,
    ErrorCode,
    FileSystemSource,
    FunctionSource,
    ImportDepthError,
    LoadOptions,
    ManifestError,
    PayloadError,
    PluginError,
    ScriptCompileError,
    StyleGenerationError,
)
from tessera.manifest import ComponentDefinition, ComponentSettings
from tessera.plugins import (
    CommandCompiler,
    PassthroughCompiler,
    ScriptCompiler,
    StyleGenerator,
    UtilityStyleGenerator,
)
from tessera.render_context import RenderSession

__version__ = "0.1.0"

__all__ = [
    "UNDEFINED",
    "ChoiceSource",
    "CommandCompiler",
    "ComponentDefinition",
    "ComponentError",
    "ComponentNotFoundError",
    "ComponentRuntimeError",
    "ComponentSettings",
    "ComponentSource",
    "CyclicImportError",
    "DictSource",
    "DirectiveSyntaxError",
    "Environment",
    "ErrorCode",
    "FileSystemSource",
    "FunctionSource",
    "ImportDepthError",
    "LoadOptions",
    "ManifestError",
    "PassthroughCompiler",
    "PayloadError",
    "PluginError",
    "RenderResult",
    "RenderSession",
    "ScriptCompileError",
    "ScriptCompiler",
    "StyleGenerationError",
    "StyleGenerator",
    "UtilityStyleGenerator",
    "__version__",
]
