"""Locking helpers for the weather cache and the display player thread."""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LockedValue(Generic[T]):
    """A single value guarded by a re-entrant lock.

    ``update`` applies a function to the value under the lock, so a
    read-modify-write cannot interleave with another thread's.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"LockedValue({self._value!r})"

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def update(self, func: Callable[[T], T]) -> T:
        with self._lock:
            self._value = func(self._value)
            return self._value

    @contextmanager
    def locked(self) -> Iterator[T]:
        """Yield the value with the lock held; rebinding it has no effect."""
        with self._lock:
            yield self._value


class StoppableThread(threading.Thread):
    """Daemon thread whose target is handed the thread itself.

    The target loops on ``should_stop()`` and sleeps through ``wait()``,
    which returns early once ``stop()`` has been called.
    """

    def __init__(
        self,
        target: Callable[..., Any],
        name: str | None = None,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        daemon: bool = True,
    ) -> None:
        super().__init__(name=name, daemon=daemon)
        self._loop_target = target
        self._loop_args = args
        self._loop_kwargs = kwargs or {}
        self._stop_requested = threading.Event()

    def run(self) -> None:
        self._loop_target(self, *self._loop_args, **self._loop_kwargs)

    def should_stop(self) -> bool:
        return self._stop_requested.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; True means a stop was requested."""
        return self._stop_requested.wait(timeout)

    def stop(self, timeout: float = 5.0) -> bool:
        """Ask the loop to finish and join it. Returns False on timeout."""
        self._stop_requested.set()
        if threading.current_thread() is self or not self.is_alive():
            return True
        self.join(timeout)
        if self.is_alive():
            logger.warning("%s still running %.1fs after stop()", self.name, timeout)
            return False
        return True
