"""Main-loop dispatcher that serializes callbacks from background threads."""

import logging
import queue
from typing import Any, Callable

logger = logging.getLogger(__name__)


class MainThreadDispatcher:
    """Queue of callables drained by the thread that owns the UI.

    Background threads call ``post``; the UI loop calls ``run_pending`` and
    every posted callable runs there, one at a time, in posting order.
    """

    def __init__(self):
        self._queue: "queue.Queue[tuple]" = queue.Queue()

    def post(self, fn: Callable[..., Any], *args, **kwargs) -> None:
        self._queue.put((fn, args, kwargs))

    def pending(self) -> int:
        return self._queue.qsize()

    def run_pending(self, timeout: float = 0.0) -> int:
        """Run queued callables.

        Waits up to ``timeout`` seconds for the first one, then runs whatever
        else is already queued without waiting.

        Returns:
            Number of callables run
        """
        processed = 0
        block = timeout > 0
        while True:
            try:
                if block:
                    fn, args, kwargs = self._queue.get(timeout=timeout)
                    block = False
                else:
                    fn, args, kwargs = self._queue.get_nowait()
            except queue.Empty:
                return processed

            try:
                fn(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in dispatched callback {getattr(fn, '__name__', fn)}: {e}",
                             exc_info=True)
            processed += 1
