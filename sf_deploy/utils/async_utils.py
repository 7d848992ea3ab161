# sf_deploy/utils/async_utils.py
"""Asynchronous operation utilities"""

import asyncio
import threading
from typing import Any, Awaitable, Callable, Coroutine, TypeVar

T = TypeVar('T')


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run async coroutine in sync context

    Args:
        coro: Coroutine to run

    Returns:
        Coroutine result
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # No running loop
        loop = None

    if loop is None or not loop.is_running():
        return asyncio.run(coro)

    # Already in async context, run on a fresh loop in a helper thread
    result = None
    exception = None

    def run_in_thread():
        nonlocal result, exception
        try:
            result = asyncio.run(coro)
        except Exception as e:
            exception = e

    thread = threading.Thread(target=run_in_thread)
    thread.start()
    thread.join()

    if exception:
        raise exception
    return result


def run_in_loop(start: Callable[[], Awaitable[T]]) -> T:
    """
    Call ``start`` from inside a running loop and wait for what it returns

    The deploy operations must be invoked while a loop is running because
    they hand back a task bound to that loop.

    Args:
        start: Callable returning an awaitable (task, future or coroutine)

    Returns:
        Result of the awaitable
    """

    async def runner():
        return await start()

    return run_async(runner())
