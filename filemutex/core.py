import os
import sys
import logging
import subprocess
from typing import Optional, Tuple

from .errors import FileMutexError
from .lock import FileLock, RETRY_BACKOFF, DEFAULT_RETRY_INTERVAL
from .utils import read_counter, write_counter

logger = logging.getLogger(__name__)


class MutexCounter:
    """Counter file whose read-modify-write is guarded by a FileLock"""

    def __init__(self,
                 counter_path: str,
                 lock_path: Optional[str] = None,
                 retry_policy: str = RETRY_BACKOFF,
                 retry_interval: float = DEFAULT_RETRY_INTERVAL,
                 progress_callback: Optional[callable] = None,
                 wait_callback: Optional[callable] = None):
        self.counter_path = os.path.abspath(counter_path)
        self.retry_policy = retry_policy
        self.retry_interval = retry_interval

        self.lock = FileLock(
            lock_path,
            retry_policy=retry_policy,
            retry_interval=retry_interval,
            on_wait=wait_callback
        )

        self.progress_callback = progress_callback or (lambda status, index: None)

    def increment(self) -> int:
        """Add one to the counter while holding the lock"""
        self.lock.lock()
        try:
            return self._increment()
        finally:
            self.lock.unlock()

    def try_increment(self) -> Optional[int]:
        """Add one to the counter if the lock is free, else return None"""
        if not self.lock.try_lock():
            logger.info(f"lock busy, counter not incremented: {self.lock.path}")
            return None

        try:
            return self._increment()
        finally:
            self.lock.unlock()

    def _increment(self) -> int:
        value = read_counter(self.counter_path) + 1
        write_counter(self.counter_path, value)
        logger.info(f"counter {self.counter_path} -> {value}")
        return value

    def reset(self, value: int = 0):
        """Set the counter while holding the lock"""
        with self.lock:
            write_counter(self.counter_path, value)

    def value(self) -> int:
        return read_counter(self.counter_path)

    def run_workers(self, workers: int) -> Tuple[int, int]:
        """Run independent processes that each increment the counter once

        Returns:
            tuple: (succeeded, failed)
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")

        command = [
            sys.executable, '-m', 'filemutex.cli', 'increment', self.counter_path,
            '--lock', self.lock.path,
            '--retry-policy', self.retry_policy,
            '--retry-interval', str(self.retry_interval),
            '--quiet',
        ]

        children = []
        try:
            for _ in range(workers):
                children.append(subprocess.Popen(
                    command,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                    text=True
                ))
        except BaseException as e:
            logger.error(f"failed to start worker {len(children)}, stopping the started ones")
            for child in children:
                child.kill()
                child.communicate()
            if isinstance(e, OSError):
                raise FileMutexError(f"failed to start worker {len(children)}: {e}") from e
            raise

        succeeded = 0
        failed = 0
        for index, child in enumerate(children):
            _, stderr = child.communicate()
            if child.returncode == 0:
                succeeded += 1
                self.progress_callback('done', index)
            else:
                failed += 1
                logger.error(f"worker {index} failed ({child.returncode}): {stderr.strip()}")
                self.progress_callback('fail', index)

        return succeeded, failed
