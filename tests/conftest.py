"""Pytest configuration for evalbridge tests."""

import shutil
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest


@pytest.fixture
def socket_path() -> Iterator[str]:
    """Provide a socket path short enough for AF_UNIX."""
    directory = tempfile.mkdtemp(prefix="evb-")
    yield str(Path(directory) / "bridge.sock")
    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture
def write_module(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes module source under tmp_path."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source)
        return path

    return _write
