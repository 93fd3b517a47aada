import os
import tempfile

import pytest

from filemutex.errors import CounterError
from filemutex.utils import default_lock_path, read_counter, write_counter


def test_default_lock_path():
    assert default_lock_path() == os.path.join(tempfile.gettempdir(), "mutex.lock")


def test_read_counter(tmp_path):
    path = tmp_path / "counter.txt"
    path.write_text("41\n")
    assert read_counter(path) == 41


def test_read_missing_or_empty_counter(tmp_path):
    path = tmp_path / "counter.txt"
    assert read_counter(path) == 0
    path.write_text("")
    assert read_counter(path) == 0


def test_read_garbage_counter(tmp_path):
    path = tmp_path / "counter.txt"
    path.write_text("forty-two")
    with pytest.raises(CounterError, match="does not hold an integer"):
        read_counter(path)


def test_write_counter(tmp_path):
    path = tmp_path / "counter.txt"
    write_counter(path, 7)
    assert path.read_text() == "7"


def test_write_counter_bad_dir(tmp_path):
    with pytest.raises(CounterError):
        write_counter(tmp_path / "missing" / "counter.txt", 1)
