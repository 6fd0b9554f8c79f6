"""Bundle payload cache with at-most-one in-flight download per filename."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable
from collections.abc import Callable

from .errors import PayloadReleasedError

logger = logging.getLogger(__name__)

PayloadLoader = Callable[[], Awaitable["PayloadHandle"]]


class PayloadHandle:
    """A downloaded bundle payload owned by the cache.

    Callers share the same handle. ``release()`` drops the underlying bytes
    and makes further reads fail; bytes a caller already read stay valid.
    """

    def __init__(self, filename: str, data: bytes, url: str | None = None):
        self.filename = filename
        self.url = url
        self.size = len(data)
        self._data: bytes | None = data

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise PayloadReleasedError(self.filename)
        return self._data

    @property
    def released(self) -> bool:
        return self._data is None

    def release(self) -> None:
        """Release the payload. Safe to call more than once."""
        self._data = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.size} bytes"
        return f"PayloadHandle(filename={self.filename}, {state})"


class BundleCache:
    """Payload handles keyed by bundle filename.

    The first miss for a filename starts a single load task; concurrent
    callers for the same filename await that task instead of starting a new
    download. Waiters are shielded, so one caller giving up does not cancel
    the download for the others.
    """

    def __init__(self) -> None:
        self._payloads: dict[str, PayloadHandle] = {}
        self._in_flight: dict[str, asyncio.Task[PayloadHandle]] = {}
        # Bumped by unload_all so loads started earlier don't repopulate the cache
        self._generation = 0

    def get(self, filename: str) -> PayloadHandle | None:
        return self._payloads.get(filename)

    def put(self, filename: str, handle: PayloadHandle) -> None:
        """Insert or replace the handle for ``filename``."""
        previous = self._payloads.get(filename)
        self._payloads[filename] = handle
        if previous is not None and previous is not handle:
            previous.release()

    async def get_or_load(self, filename: str, loader: PayloadLoader) -> PayloadHandle:
        """Return the cached handle for ``filename``, loading it at most once.

        Args:
            filename: Cache key
            loader: Coroutine factory that downloads and wraps the payload

        Returns:
            The cached (or freshly loaded) handle

        Raises:
            Whatever ``loader`` raises; nothing is cached in that case
        """
        cached = self._payloads.get(filename)
        if cached is not None:
            logger.debug(f"Found existing bundle for {filename}")
            return cached

        task = self._in_flight.get(filename)
        if task is None:
            logger.debug(f"No existing bundle for {filename}")
            task = asyncio.ensure_future(self._load(filename, loader, self._generation))
            self._in_flight[filename] = task
            # Retrieve the failure even if every waiter was cancelled
            task.add_done_callback(functools.partial(self._log_failed_load, filename))
        else:
            logger.debug(f"Joining in-flight download for {filename}")

        return await asyncio.shield(task)

    async def _load(self, filename: str, loader: PayloadLoader, generation: int) -> PayloadHandle:
        try:
            handle = await loader()
        finally:
            if self._in_flight.get(filename) is asyncio.current_task():
                del self._in_flight[filename]

        if generation == self._generation:
            self.put(filename, handle)
        else:
            logger.debug(f"Cache was unloaded while {filename} was downloading; not caching it")
        return handle

    @staticmethod
    def _log_failed_load(filename: str, task: asyncio.Task[PayloadHandle]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Download of {filename} failed: {error}")

    def unload_all(self) -> int:
        """Release every cached payload and clear the cache.

        Returns:
            Number of handles released
        """
        self._generation += 1
        self._in_flight.clear()

        handles = list(self._payloads.values())
        for handle in handles:
            handle.release()
        self._payloads.clear()

        logger.info(f"Unloaded {len(handles)} cached bundle(s)")
        return len(handles)

    def __contains__(self, filename: object) -> bool:
        return filename in self._payloads

    def __len__(self) -> int:
        return len(self._payloads)
