"""Deadline helper for store and cache calls."""

import asyncio
from typing import Awaitable, TypeVar

from rolegate.core.exceptions import OperationTimeout

T = TypeVar("T")


async def with_deadline(
    awaitable: Awaitable[T],
    timeout: float | None,
    operation: str,
) -> T:
    """
    Await with an optional deadline.

    On expiry the in-flight awaitable is cancelled and OperationTimeout is
    raised in its place.
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise OperationTimeout(operation, timeout) from exc
