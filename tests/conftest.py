import os
import sys
import subprocess
import textwrap
from pathlib import Path

import pytest

REPO_ROOT = str(Path(__file__).resolve().parent.parent)
sys.path.insert(0, REPO_ROOT)


@pytest.fixture(autouse=True)
def _child_pythonpath(monkeypatch):
    """Make filemutex importable from child processes."""
    existing = os.environ.get("PYTHONPATH")
    monkeypatch.setenv("PYTHONPATH", REPO_ROOT + (os.pathsep + existing if existing else ""))
    monkeypatch.delenv("FILEMUTEX_LOCK_PATH", raising=False)


@pytest.fixture
def lock_path(tmp_path):
    return tmp_path / "mutex.lock"


@pytest.fixture
def counter_path(tmp_path):
    path = tmp_path / "counter.txt"
    path.write_text("0")
    return path


def _child_script(script: str, lock_path: Path) -> str:
    """Prefix a snippet with the imports and lock_path it expects."""
    return textwrap.dedent(f"""
import sys
sys.path.insert(0, {REPO_ROOT!r})
from filemutex import FileLock
lock_path = {str(lock_path)!r}
""") + textwrap.dedent(script)


def run_child(script: str, lock_path: Path, timeout: int = 10) -> subprocess.CompletedProcess:
    """Run a Python snippet in a subprocess that has FileLock available."""
    return subprocess.run(
        [sys.executable, "-c", _child_script(script, lock_path)],
        capture_output=True, text=True, timeout=timeout
    )


def spawn_child(script: str, lock_path: Path) -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-c", _child_script(script, lock_path)],
        stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True
    )
