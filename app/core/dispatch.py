# app/core/dispatch.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Dispatcher(Protocol):
    """
    Decides where a unit of work runs. Callers always block for the result.
    """

    name: str

    def run_await(self, work: Callable[..., T], *args, **kwargs) -> T:
        ...


class InlineDispatcher:
    """
    Run the work on the caller's own thread.

    Blocking I/O inside `work` blocks the caller directly.
    """

    name = "sync"

    def run_await(self, work: Callable[..., T], *args, **kwargs) -> T:
        return work(*args, **kwargs)


class OffloadedDispatcher:
    """
    Hand the work to a worker pool and block until it finishes.

    Not fire-and-forget: the worker's return value is handed back and any
    exception it raised is re-raised here unchanged, so callers see the
    same outcome as with InlineDispatcher.

    Saturation: when every worker is busy, submissions queue without limit
    and callers simply wait longer.
    """

    name = "async"

    def __init__(self, max_workers: int | None = None):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="cart-worker",
        )

    def run_await(self, work: Callable[..., T], *args, **kwargs) -> T:
        future = self._executor.submit(work, *args, **kwargs)
        return future.result()

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down cart worker pool")
        self._executor.shutdown(wait=wait)
