"""Compute-once cell that also remembers failure.

A lazily built singleton that raises on construction would normally be
rebuilt by every consumer that asks for it. When the construction is a
remote call already known to fail, each retry only adds load and
latency. ``OnceCell`` runs the factory at most once, then either
returns the cached value or re-raises the cached exception.
"""

import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OnceCell(Generic[T]):
    """Single-flight, failure-memoizing holder for one computed value.

    Concurrent first callers block on a lock while one of them runs the
    factory. After that the cell is immutable: the value (or the
    exception) is handed to every later caller without locking.

    :param factory: Zero-argument callable producing the value
    :param name: Label used in log messages
    """

    def __init__(self, factory: Callable[[], T], name: str = "value"):
        self._factory = factory
        self._name = name
        self._lock = threading.Lock()
        self._done = False
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None

    @property
    def is_set(self) -> bool:
        """True once the factory has run, whether it succeeded or not."""
        return self._done

    @property
    def failed(self) -> bool:
        """True if the factory ran and raised."""
        return self._done and self._error is not None

    def get(self) -> T:
        """Return the cached value, computing it on first use.

        :return: The value produced by the factory
        :raises Exception: The exception raised by the first factory run
        """
        if not self._done:
            with self._lock:
                if not self._done:
                    self._compute()
        if self._error is not None:
            logger.warning(f"replaying cached {self._name} failure: {self._error}")
            raise self._error
        return self._value  # type: ignore[return-value]

    def peek(self) -> Optional[T]:
        """Return the value if already computed successfully, without computing."""
        if self._done and self._error is None:
            return self._value
        return None

    def _compute(self) -> None:
        # BaseException (KeyboardInterrupt, SystemExit) leaves the cell empty
        try:
            self._value = self._factory()
        except Exception as e:
            self._error = e
            logger.error(f"{self._name} failed, caching failure: {e}")
        self._done = True

    def __repr__(self) -> str:
        state = "failed" if self.failed else ("set" if self._done else "empty")
        return f"OnceCell({self._name!r}, {state})"
