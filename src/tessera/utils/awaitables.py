"""Helpers for collaborators that may be sync or async."""

from __future__ import annotations

import inspect
from typing import Any, TypeVar

T = TypeVar("T")


async def maybe_await(value: T | Any) -> T:
    """Await ``value`` when it is awaitable, otherwise return it unchanged.

    Sources, script compilers and style generators may implement their
    operation as a plain function or a coroutine function.
    """
    if inspect.isawaitable(value):
        return await value
    return value
