"""Shared functionality for running operations with ordered cleanup."""

from abc import ABC
import contextlib
import threading
from typing import Any, Callable

from syncspace.logger import log


class Operations(ABC):
    """Base class for operations that acquire resources which must be released."""

    def run(self) -> int:
        """Run the operations and clean up properly in case of errors."""
        with contextlib.ExitStack() as stack:
            return self._run(stack)

        # https://github.com/python/mypy/issues/7726
        assert False, "unreachable"

    def _run(self, stack: contextlib.ExitStack) -> int:
        """
        Run the actual operations.

        Cleanup actions are pushed onto the stack as soon as the matching resource has
        been acquired and run in reverse order on any exit path.
        """
        raise NotImplementedError()

    @staticmethod
    def _start_thread(target: Callable[..., None], *args: Any) -> threading.Thread:
        """
        Start a thread with the specified function.

        It is still made a daemon just in case the thread fails to exit properly and
        blocks the shutting down of the program.
        """
        t = threading.Thread(target=target, args=args, daemon=True)
        t.start()
        return t

    @staticmethod
    def _start_disposable_thread(target: Callable[..., None], *args: Any) -> None:
        """Start a disposable thread with the specified function."""
        t = threading.Thread(target=target, args=args, daemon=True)
        t.start()

    @staticmethod
    def _log_errors(description: str, call: Callable[..., Any]) -> Callable[..., None]:
        """Wrap a cleanup action so that its failure is logged instead of raised."""

        def wrapper(*args: Any, **kwargs: Any) -> None:
            try:
                call(*args, **kwargs)
            except Exception as e:
                log.error(f"failed to {description}: {e}")

        return wrapper
