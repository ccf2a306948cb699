"""Enhancement-script compilers.

A compiler turns a component's script source into browser-ready code. An
empty result means there is nothing to inject. Compilers raise
``ScriptCompileError`` on failure; the renderer logs it and skips the script.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from typing import Protocol

from tessera.environment.exceptions import ScriptCompileError

logger = logging.getLogger(__name__)


class ScriptCompiler(Protocol):
    def compile(self, source: str) -> str | Awaitable[str]: ...


class PassthroughCompiler:
    """Use the script source as written (surrounding whitespace stripped)."""

    def compile(self, source: str) -> str:
        return source.strip()


class CommandCompiler:
    """Pipe the script source through an external transpiler or minifier.

    The command reads the source on stdin and writes the compiled script to
    stdout, e.g. ``["esbuild", "--loader=ts", "--minify"]``.

    Args:
        command: Program and arguments
        timeout: Seconds to wait before giving up
    """

    __slots__ = ("command", "timeout")

    def __init__(self, command: Sequence[str], *, timeout: float = 30.0):
        if not command:
            raise ValueError("command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    async def compile(self, source: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ScriptCompileError(f"Cannot run {self.command[0]!r}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(source.encode("utf-8")), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ScriptCompileError(f"{self.command[0]!r} timed out after {self.timeout}s") from exc

        if process.returncode != 0:
            detail = stderr.decode("utf-8", "replace").strip()
            raise ScriptCompileError(f"{self.command[0]!r} exited with {process.returncode}: {detail}")
        logger.debug("Compiled script with %s (%d bytes)", self.command[0], len(stdout))
        return stdout.decode("utf-8").strip()
