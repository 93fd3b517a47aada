"""Utility functions for lock paths and counter files"""

import os
import tempfile

from .errors import CounterError

DEFAULT_LOCK_NAME = 'mutex.lock'


def default_lock_path() -> str:
    """Lock path shared by every instance that is not given one"""
    return os.path.join(tempfile.gettempdir(), DEFAULT_LOCK_NAME)


def read_counter(counter_path: str) -> int:
    """Read the integer stored in a counter file. Missing or empty counts as 0."""
    try:
        with open(counter_path, 'r', encoding='utf-8') as f:
            content = f.read().strip()
    except FileNotFoundError:
        return 0
    except OSError as e:
        raise CounterError(f"cannot read counter {counter_path}: {e}") from e

    if not content:
        return 0
    try:
        return int(content)
    except ValueError:
        raise CounterError(f"counter {counter_path} does not hold an integer: {content[:20]!r}") from None


def write_counter(counter_path: str, value: int):
    try:
        with open(counter_path, 'w', encoding='utf-8') as f:
            f.write(str(value))
    except OSError as e:
        raise CounterError(f"cannot write counter {counter_path}: {e}") from e
