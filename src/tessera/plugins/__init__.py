"""Pluggable collaborators: stylesheet generators and script compilers."""

from tessera.plugins.scripts import CommandCompiler, PassthroughCompiler, ScriptCompiler
from tessera.plugins.styles import StyleGenerator, UtilityStyleGenerator

__all__ = [
    "CommandCompiler",
    "PassthroughCompiler",
    "ScriptCompiler",
    "StyleGenerator",
    "UtilityStyleGenerator",
]
