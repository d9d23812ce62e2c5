"""Concurrent per-backend calls with partial-failure semantics."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TypeVar

from toolstream.core.errors import BackendListFailure
from toolstream.core.protocols import BackendSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_per_backend(
    sessions: Mapping[str, BackendSession],
    operation: str,
    call: Callable[[BackendSession], Awaitable[T]],
) -> tuple[dict[str, T], dict[str, BackendListFailure]]:
    """
    Run `call` against every backend concurrently.

    A failing backend never fails the others; it is reported in the
    second return value instead.

    Args:
        sessions: Backend name → session
        operation: Label for logs and failures (e.g. "list_tools")
        call: Coroutine factory invoked once per session

    Returns:
        Tuple of (results by backend, failures by backend), both in
        the iteration order of `sessions`.
    """
    names = list(sessions)
    outcomes = await asyncio.gather(
        *(call(sessions[name]) for name in names), return_exceptions=True
    )

    results: dict[str, T] = {}
    failures: dict[str, BackendListFailure] = {}
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, Exception):
            failures[name] = BackendListFailure(name, operation, outcome)
            logger.warning(f"{operation} failed for backend '{name}', skipping: {outcome}")
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results[name] = outcome

    return results, failures
