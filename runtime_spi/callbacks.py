"""
Callback-style completion for runtime SPI calls.

Some callers expect the Node-style ``callback(error, result)`` contract
instead of awaiting a coroutine. dispatch() schedules an operation on the
running event loop and reports its outcome through such a callback, exactly
once.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Optional[Exception], Any], None]


class CompletionGuard:
    """
    Wraps a completion callback so it can only fire once.

    A second completion is a programming error and raises RuntimeError
    instead of reaching the wrapped callback.
    """

    def __init__(self, callback: CompletionCallback):
        self._callback = callback
        self.fired = False

    def __call__(self, error: Optional[Exception], result: Any = None) -> None:
        if self.fired:
            raise RuntimeError("completion callback already invoked")
        self.fired = True
        self._callback(error, result)


def dispatch(
    operation: Awaitable[Any], callback: CompletionCallback
) -> "asyncio.Task[None]":
    """
    Run an adapter operation and report the outcome through a callback.

    Args:
        operation: Awaitable returned by an adapter method
        callback: Called with (None, result) on success or (error, None) on
            any exception the operation raises (an AdapterError for
            adapter failures)

    Returns:
        The scheduled task. Cancelling it suppresses the callback.
    """
    guard = CompletionGuard(callback)

    async def run() -> None:
        try:
            result = await operation
        except Exception as e:
            logger.debug(f"Operation failed, reporting to callback: {e!r}")
            guard(e, None)
            return
        guard(None, result)

    return asyncio.create_task(run())
