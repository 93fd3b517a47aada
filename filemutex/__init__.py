"""Inter-process mutex backed by an advisory lock file"""

from .errors import (
    FileMutexError,
    AlreadyLockedError,
    NotLockedError,
    OpenFailedError,
    UnlockFailedError,
    CounterError,
    ConfigError,
)
from .lock import FileLock, RETRY_SPIN, RETRY_BACKOFF
from .core import MutexCounter

__version__ = '0.1.0'

__all__ = [
    'FileLock',
    'MutexCounter',
    'RETRY_SPIN',
    'RETRY_BACKOFF',
    'FileMutexError',
    'AlreadyLockedError',
    'NotLockedError',
    'OpenFailedError',
    'UnlockFailedError',
    'CounterError',
    'ConfigError',
]
