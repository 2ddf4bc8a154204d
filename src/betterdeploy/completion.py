# completion.py
from __future__ import annotations

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Optional

from .errors import CompletionError, UnitTimeout


class Completion:
    """
    Done-signal handed to callback units.

    Usage inside a unit:

        def run_tests(done):
            print("Function test done.")
            done()            # success
            # or: done(exc)   # failure

    The handle must be signalled exactly once; it may be signalled from any
    thread. A second signal raises CompletionError and the first result stands.
    """

    def __init__(self, label: str = "unit"):
        self.label = label
        self._future: Future = Future()
        self._lock = threading.Lock()
        self._signalled = False

    def __call__(self, error: Optional[BaseException] = None) -> None:
        if error is None:
            self.success()
        else:
            self.fail(error)

    def _claim(self) -> None:
        with self._lock:
            if self._signalled:
                raise CompletionError(f"{self.label} signalled completion more than once")
            self._signalled = True

    def success(self) -> None:
        self._claim()
        self._future.set_result(None)

    def fail(self, error: BaseException) -> None:
        if not isinstance(error, BaseException):
            # node-style done("message")
            error = RuntimeError(str(error))
        self._claim()
        self._future.set_exception(error)

    @property
    def signalled(self) -> bool:
        return self._signalled

    def done(self) -> bool:
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until signalled; re-raise the signalled error, if any."""
        try:
            exc = self._future.exception(timeout=timeout)
        except FutureTimeout:
            raise UnitTimeout(
                f"{self.label} did not signal completion within {timeout}s"
            ) from None
        if exc is not None:
            raise exc
