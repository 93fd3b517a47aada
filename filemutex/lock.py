"""Lock mechanism for inter-process mutual exclusion"""

import os
import time
import fcntl
import logging
from typing import Callable, Optional

from .errors import (
    AlreadyLockedError,
    NotLockedError,
    OpenFailedError,
    UnlockFailedError,
)
from .utils import default_lock_path

logger = logging.getLogger(__name__)

RETRY_SPIN = 'spin'
RETRY_BACKOFF = 'backoff'
RETRY_POLICIES = (RETRY_SPIN, RETRY_BACKOFF)

DEFAULT_RETRY_INTERVAL = 1.0


class FileLock:
    """File-based mutex on top of an exclusive flock.

    Every process that wants to coordinate points a FileLock at the same
    path. The OS guarantees that at most one of them holds the exclusive
    lock at a time; the instance only tracks whether *it* holds it, to
    catch double lock/unlock in the calling code.

    The lock file is created on demand and never removed or written to.

    `retry_policy` controls how lock() waits while the lock is contended:

    - ``"spin"``: retry immediately, no delay.
    - ``"backoff"``: sleep `retry_interval` seconds between attempts and
      call `on_wait(attempt)` before each sleep.

    Waiters are not served in FIFO order. lock() has no timeout; use
    try_lock() in a loop for a bounded wait.

    An instance must not be shared between threads without external
    synchronization.
    """

    def __init__(self,
                 path: Optional[str] = None,
                 retry_policy: str = RETRY_BACKOFF,
                 retry_interval: float = DEFAULT_RETRY_INTERVAL,
                 on_wait: Optional[Callable[[int], None]] = None):
        if retry_policy not in RETRY_POLICIES:
            raise ValueError(f"unknown retry policy: {retry_policy!r}")
        if retry_interval < 0:
            raise ValueError("retry_interval must not be negative")

        self.path = os.fspath(path) if path is not None else default_lock_path()
        self.retry_policy = retry_policy
        self.retry_interval = retry_interval
        self.on_wait = on_wait
        self._handle = None
        self._held = False

    @property
    def held(self) -> bool:
        """Whether this instance currently holds the lock"""
        return self._held

    def lock(self):
        """Acquire the lock, waiting while another process holds it"""
        if self._held:
            raise AlreadyLockedError()

        handle = self._open()
        attempt = 0
        try:
            while not self._try_flock(handle):
                attempt += 1
                if self.retry_policy == RETRY_SPIN:
                    continue
                logger.debug(f"lock busy: {self.path} (attempt {attempt})")
                if self.on_wait:
                    self.on_wait(attempt)
                time.sleep(self.retry_interval)
        except BaseException:
            self._close()
            raise

        self._held = True
        logger.debug(f"locked: {self.path}")

    def try_lock(self) -> bool:
        """Acquire the lock if it is free. Never waits.

        Returns False, without raising, when this instance already holds
        the lock or another process does.
        """
        if self._held:
            return False

        handle = self._open()
        try:
            acquired = self._try_flock(handle)
        except BaseException:
            self._close()
            raise

        if not acquired:
            self._close()
            return False

        self._held = True
        logger.debug(f"locked: {self.path}")
        return True

    def unlock(self):
        """Release the lock. The lock file stays on disk."""
        if not self._held:
            raise NotLockedError()

        try:
            fcntl.flock(self._handle, fcntl.LOCK_UN)
        except OSError as e:
            # closing the descriptor drops the flock anyway
            self._held = False
            self._close()
            raise UnlockFailedError(self.path, e.strerror or str(e)) from e

        self._held = False
        self._close()
        logger.debug(f"unlocked: {self.path}")

    def _open(self):
        if self._handle is None:
            try:
                self._handle = open(self.path, 'a+')
            except OSError as e:
                raise OpenFailedError(self.path, e.strerror or str(e)) from e
        return self._handle

    def _close(self):
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    @staticmethod
    def _try_flock(handle) -> bool:
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
            return True
        except BlockingIOError:
            return False

    def __enter__(self):
        self.lock()
        return self

    def __exit__(self, *_):
        self.unlock()

    def __repr__(self):
        state = 'locked' if self._held else 'unlocked'
        return f"<FileLock {self.path!r} {state}>"
