import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

from .errors import IOFailure

logger = logging.getLogger(__name__)


class FilesystemGateway:
    """
    Runs blocking filesystem calls with an optional per-call timeout.

    A call that outlives the timeout is reported as IOFailure. Its worker
    thread cannot be interrupted, so the pool it occupies is retired and
    the next call starts a fresh one.
    """

    def __init__(self, timeout=None, max_workers=8):
        self.timeout = timeout or None
        self.max_workers = max_workers
        self._executor = None
        self._lock = threading.Lock()

    def _get_executor(self):
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="filemanager-fs",
                )
            return self._executor

    def _retire(self, executor):
        with self._lock:
            if self._executor is executor:
                self._executor = None
        executor.shutdown(wait=False)

    def call(self, fn, *args, **kwargs):
        if self.timeout is None:
            return fn(*args, **kwargs)

        executor = self._get_executor()
        future = executor.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeout:
            name = getattr(fn, '__name__', repr(fn))
            logger.error(f"Filesystem call {name} timed out after {self.timeout}s")
            self._retire(executor)
            raise IOFailure(f"Filesystem call timed out after {self.timeout}s")
