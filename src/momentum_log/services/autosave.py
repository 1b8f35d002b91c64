"""Debounced saving for editors that write on every keystroke."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class AutosaveCoalescer:
    """Coalesces rapid edits into a single write of the latest value.

    ``schedule()`` (re)starts a debounce timer holding the newest value.
    ``flush()`` cancels any waiting timer and writes immediately. Each call to
    ``schedule()`` bumps a generation counter; a timer that wakes up for an
    older generation does nothing. Writes are serialized and always take the
    newest pending value, so an older value is never written after a newer
    one and the latest value is never dropped by a flush.
    """

    def __init__(self, write: Callable[[Any], Awaitable[None]], delay: float = 0.4):
        self._write = write
        self.delay = delay
        self._value: Any = None
        self._dirty = False
        self._generation = 0
        self._timer: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def pending(self) -> bool:
        """Whether a value is waiting to be written."""
        return self._dirty

    @property
    def generation(self) -> int:
        return self._generation

    def schedule(self, value: Any) -> None:
        """Queue ``value`` to be written after the debounce delay."""
        if self._closed:
            raise RuntimeError("Autosave is closed")
        self._value = value
        self._dirty = True
        self._generation += 1
        self._cancel_timer()
        self._timer = asyncio.create_task(self._write_after_delay(self._generation))

    async def flush(self) -> None:
        """Write the pending value now, superseding any waiting timer."""
        self._cancel_timer()
        await self._write_pending()

    async def close(self) -> None:
        """Flush and refuse further scheduling."""
        try:
            await self.flush()
        finally:
            self._closed = True

    def _cancel_timer(self) -> None:
        # Only a timer still sleeping is cancelled; one already writing finishes
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _write_after_delay(self, generation: int) -> None:
        await asyncio.sleep(self.delay)
        if generation != self._generation:
            return
        self._timer = None
        try:
            await self._write_pending()
        except Exception:
            # Value stays pending; the next flush retries it
            logger.exception("Autosave failed")

    async def _write_pending(self) -> None:
        async with self._lock:
            if not self._dirty:
                return
            value = self._value
            generation = self._generation
            self._dirty = False
            try:
                await self._write(value)
            except Exception:
                if generation == self._generation:
                    self._dirty = True
                raise
