"""Exceptions raised by filemutex"""


class FileMutexError(RuntimeError):
    """Base filemutex exception"""


class AlreadyLockedError(FileMutexError):
    """Raised when lock() is called on an instance that already holds the lock"""

    def __init__(self, message: str = 'Lock already acquired'):
        super().__init__(message)


class NotLockedError(FileMutexError):
    """Raised when unlock() is called on an instance that does not hold the lock"""

    def __init__(self, message: str = 'Lock not acquired'):
        super().__init__(message)


class OpenFailedError(FileMutexError):
    """Raised when the lock file cannot be opened or created"""

    def __init__(self, path: str, reason: str = ''):
        self.path = path
        message = f"Failed to open lock file {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnlockFailedError(FileMutexError):
    """Raised when releasing the OS lock fails. The handle is already closed."""

    def __init__(self, path: str, reason: str = ''):
        self.path = path
        message = f"Failed to unlock {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CounterError(FileMutexError):
    """Raised when the counter file cannot be read or holds no integer"""


class ConfigError(FileMutexError):
    """Raised when configuration values are invalid"""
