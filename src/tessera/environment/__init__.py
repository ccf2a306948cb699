"""Environment, component sources, exceptions and terminal helpers."""

from tessera.environment.core import Environment
from tessera.environment.exceptions import (
    ComponentError,
    ComponentNotFoundError,
    ComponentRuntimeError,
    CyclicImportError,
    DirectiveSyntaxError,
    ErrorCode,
    ImportDepthError,
    ManifestError,
    PayloadError,
    PluginError,
    ScriptCompileError,
    StyleGenerationError,
)
from tessera.environment.sources import (
    ChoiceSource,
    ComponentSource,
    DictSource,
    FileSystemSource,
    FunctionSource,
    LoadOptions,
)

__all__ = [
    "ChoiceSource",
    "ComponentError",
    "ComponentNotFoundError",
    "ComponentRuntimeError",
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
    "PayloadError",
    "PluginError",
    "ScriptCompileError",
    "StyleGenerationError",
]
