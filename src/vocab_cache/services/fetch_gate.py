"""Fetch Gate - serializes and throttles calls to one external service."""

import asyncio
import inspect
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class FetchGate:
    """
    Single-flight throttle for one third-party service.

    Calls run one at a time under an asyncio lock, and each call starts at least
    ``min_interval`` seconds after the previous one finished. A batched call is
    throttled like any other single call. Exceptions propagate to the caller;
    the gate never retries.

    Coroutine functions are awaited on the event loop. Plain callables run on
    the gate's own worker thread, always the same one, so clients holding
    thread-bound handles (Jamdict's SQLite context) stay usable across calls.
    """

    def __init__(
        self,
        name: str,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.name = name
        self.min_interval = min_interval
        self.calls = 0
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_finished: Optional[float] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    async def call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``func`` (sync or async) once its turn and the minimum delay have come."""
        async with self._lock:
            await self._wait_turn()
            self.calls += 1
            try:
                if inspect.iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                result = await self._run_in_worker(func, *args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
                return result
            finally:
                self._last_finished = self._clock()

    def close(self) -> None:
        """Stop the worker thread, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    async def _run_in_worker(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self.name}-gate")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args, **kwargs))

    async def _wait_turn(self) -> None:
        if self._last_finished is None or self.min_interval == 0:
            return
        remaining = self.min_interval - (self._clock() - self._last_finished)
        if remaining > 0:
            logger.debug("%s gate waiting %.3fs", self.name, remaining)
            await self._sleep(remaining)
