"""A fixed-size pool of worker threads fed from a shared task queue."""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import Future
from typing import Any, Callable, Deque


class ThreadPool:
    """Runs submitted callables on a fixed set of worker threads.

    Tasks are taken in submission order. Shutting the pool down lets the
    workers finish every task already queued before they exit.
    """

    def __init__(self, size: int = 10) -> None:
        self._tasks: Deque[Callable[[], None]] = deque()
        self._cond = threading.Condition()
        self._stopped = False
        self._threads = [
            threading.Thread(target=self._work, name=f"threadpool-{index}", daemon=True)
            for index in range(size)
        ]
        for thread in self._threads:
            thread.start()

    @property
    def size(self) -> int:
        """Number of worker threads."""
        return len(self._threads)

    @property
    def stopped(self) -> bool:
        """Whether the pool has been shut down."""
        with self._cond:
            return self._stopped

    def _work(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._stopped or bool(self._tasks))
                if self._stopped and not self._tasks:
                    return
                task = self._tasks.popleft()
            task()

    def add(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Queue ``func(*args, **kwargs)`` and return a future for its result."""
        future: Future = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = func(*args, **kwargs)
            except BaseException as exc:  # delivered through the future
                future.set_exception(exc)
            else:
                future.set_result(result)

        with self._cond:
            if self._stopped:
                raise RuntimeError("enqueue on stopped ThreadPool")
            self._tasks.append(run)
            self._cond.notify()
        return future

    def shutdown(self) -> None:
        """Stop accepting tasks, drain the queue and join the workers."""
        with self._cond:
            self._stopped = True
            self._cond.notify_all()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current and thread.is_alive():
                thread.join()

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()