"""Process-wide bounded worker pool for scan units."""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

logger = logging.getLogger(__name__)


class WorkerPool:
    """Fixed-size thread pool; extra work queues instead of being rejected."""

    def __init__(self, size: int):
        if size < 1:
            raise ValueError("Worker pool size must be at least 1")
        self.size = size
        self._executor = ThreadPoolExecutor(max_workers=size, thread_name_prefix="scanhub-unit")

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        return self._executor.submit(fn, *args)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)


_shared_pool: WorkerPool | None = None
_shared_lock = threading.Lock()


def get_worker_pool(size: int) -> WorkerPool:
    """Return the process-wide pool, creating it on first use."""
    global _shared_pool
    with _shared_lock:
        if _shared_pool is None:
            _shared_pool = WorkerPool(size)
            logger.info("Started shared worker pool with %d workers", size)
        elif _shared_pool.size != size:
            logger.warning(
                "Shared worker pool already running with %d workers; ignoring size %d",
                _shared_pool.size,
                size,
            )
        return _shared_pool


def shutdown_worker_pool(wait: bool = True) -> None:
    """Stop the process-wide pool (used at exit and in tests)."""
    global _shared_pool
    with _shared_lock:
        if _shared_pool is not None:
            _shared_pool.shutdown(wait=wait)
            _shared_pool = None
