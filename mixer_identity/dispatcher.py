"""
Owning-thread task queue.

Every change to the adopted-session slot runs on the thread that calls
``Dispatcher.run()``. Audio notifications arrive on arbitrary COM threads
and hop here with ``invoke``; the deferred release uses ``invoke_later``.
"""

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable

from .constants import DISPATCHER_IDLE_WAIT

logger = logging.getLogger(__name__)


class Dispatcher:
    """A single-consumer queue of (optionally delayed) callables."""

    def __init__(self, idle_wait: float = DISPATCHER_IDLE_WAIT):
        self._cond = threading.Condition()
        self._tasks: list[tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()
        self._stopping = False
        self._owner: int | None = None
        self._idle_wait = idle_wait

    def invoke(self, fn: Callable[[], None]) -> bool:
        """Queue ``fn`` to run on the owning thread. Never runs it inline."""
        return self.invoke_later(0.0, fn)

    def invoke_later(self, delay: float, fn: Callable[[], None]) -> bool:
        """Queue ``fn`` to run on the owning thread after ``delay`` seconds.

        Returns False if the dispatcher is stopping and the task was dropped.
        """
        with self._cond:
            if self._stopping:
                logger.debug("Dispatcher stopping; dropped %r", fn)
                return False
            due = time.monotonic() + max(delay, 0.0)
            heapq.heappush(self._tasks, (due, next(self._seq), fn))
            self._cond.notify()
        return True

    def is_owning_thread(self) -> bool:
        return self._owner == threading.get_ident()

    def stop(self) -> None:
        """Ask ``run()`` to return once every task already due has run.

        Delayed tasks that are not yet due are discarded.
        """
        with self._cond:
            self._stopping = True
            self._cond.notify()

    def run(self) -> None:
        """Process tasks on the calling thread until ``stop()`` is called."""
        self._owner = threading.get_ident()
        try:
            while True:
                fn = self._next_task()
                if fn is None:
                    return
                try:
                    fn()
                except Exception:
                    logger.exception("Unhandled error in dispatched task %r", fn)
        finally:
            self._owner = None

    def _next_task(self) -> Callable[[], None] | None:
        with self._cond:
            while True:
                now = time.monotonic()
                if self._tasks and self._tasks[0][0] <= now:
                    return heapq.heappop(self._tasks)[2]
                if self._stopping:
                    dropped = len(self._tasks)
                    self._tasks.clear()
                    if dropped:
                        logger.debug("Dispatcher stopped with %d delayed task(s) pending", dropped)
                    return None
                timeout = self._idle_wait
                if self._tasks:
                    timeout = min(timeout, self._tasks[0][0] - now)
                self._cond.wait(timeout)
