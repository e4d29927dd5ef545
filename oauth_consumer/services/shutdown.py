"""One-shot completion signal from the callback listener to the orchestrator.

WHY NOT asyncio.Event
----------------------
An Event can be cleared and set again; this signal must fire at most once
per process.  It wraps a single-slot Future: the orchestrator awaits it,
the listener resolves it once, and every later ``fire()`` is a no-op that
returns False.

The listener may run on another thread/loop (FastAPI's TestClient does
this), so resolution is marshalled onto the loop that is waiting.
"""

from __future__ import annotations

import asyncio
import logging
import threading

logger = logging.getLogger(__name__)


class ShutdownSignal:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fired = False
        self._future: asyncio.Future[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def fired(self) -> bool:
        return self._fired

    def fire(self) -> bool:
        """Resolve the signal. Returns True only for the first call."""
        with self._lock:
            if self._fired:
                logger.debug("Shutdown signal already fired; ignoring")
                return False
            self._fired = True
            future, loop = self._future, self._loop

        logger.info("Shutdown signal fired")
        if future is not None and loop is not None:
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                _resolve(future)
            else:
                loop.call_soon_threadsafe(_resolve, future)
        return True

    async def wait(self) -> None:
        with self._lock:
            if self._future is None:
                self._loop = asyncio.get_running_loop()
                self._future = self._loop.create_future()
                if self._fired:
                    _resolve(self._future)
            future = self._future
        await asyncio.shield(future)


def _resolve(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)
