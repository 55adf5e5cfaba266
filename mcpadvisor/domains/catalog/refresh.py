"""
Background Index - Build search indexes off the request path.

Features:
- Builds run in their own asyncio task, so a caller timing out never cancels them
- The finished index replaces the previous one in a single assignment
- Failed builds are logged and not retried until ``retry_after`` has passed
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

__all__ = ["BackgroundIndex", "DEFAULT_RETRY_AFTER_SECONDS"]

T = TypeVar("T")

DEFAULT_RETRY_AFTER_SECONDS = 60.0


class BackgroundIndex(Generic[T]):
    """
    Holds the current index and (re)builds it in a background task.

    Example:
        >>> index = BackgroundIndex(build_engine, name="getmcp")
        >>> index.refresh()
        >>> engine = await index.get()
    """

    def __init__(
        self,
        build: Callable[[], Awaitable[T]],
        name: str,
        retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize index holder.

        Args:
            build: Coroutine function producing a complete index
            name: Label used in log messages
            retry_after: Seconds to wait after a failed build before the next one
            clock: Monotonic time source in seconds
        """
        self._build = build
        self._name = name
        self._retry_after = retry_after
        self._clock = clock
        self._current: T | None = None
        self._task: asyncio.Task[T] | None = None
        self._failed_at: float | None = None

    @property
    def current(self) -> T | None:
        return self._current

    @property
    def building(self) -> bool:
        return self._task is not None and not self._task.done()

    def refresh(self) -> asyncio.Task[T] | None:
        """
        Start a build unless one is running or a recent build failed.

        Returns:
            The running build task, or None while failed builds are throttled
        """
        if self._task is not None and not self._task.done():
            return self._task
        if self._failed_at is not None and self._clock() - self._failed_at < self._retry_after:
            return None

        self._task = asyncio.create_task(self._build())
        self._task.add_done_callback(self._finished)
        logger.debug("Started %s index build", self._name)
        return self._task

    async def get(self, stale: bool = False) -> T | None:
        """
        Current index, waiting for the first build if there is none yet.

        A stale index is still returned while its replacement builds.
        The first build is shielded: cancelling the caller leaves it running.

        Raises:
            Exception: The first build's error, for the caller that awaited it
        """
        if self._current is not None:
            if stale:
                self.refresh()
            return self._current

        task = self.refresh()
        if task is None:
            return None
        return await asyncio.shield(task)

    async def wait(self) -> None:
        """Wait for a running build to finish; its errors are only logged."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait({self._task})
        self._task = None

    def _finished(self, task: asyncio.Task[T]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._failed_at = self._clock()
            logger.warning(
                "%s index build failed, retrying after %.0fs: %s",
                self._name,
                self._retry_after,
                error,
            )
            return
        self._current = task.result()
        self._failed_at = None
        logger.debug("%s index build finished", self._name)
