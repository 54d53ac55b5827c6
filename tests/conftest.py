"""Test configuration and fixtures."""

import uuid
from collections.abc import Generator, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import fsspec
import pytest
from fastapi.testclient import TestClient

from anniversary.main import app
from anniversary.site import Site

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 56


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 2, 14, 9, 30, tzinfo=UTC)

    def __call__(self) -> datetime:
        moment = self.current
        self.current = moment + timedelta(seconds=1)
        return moment


@pytest.fixture(params=["file", "memory"])
def fs_impl(
    request: pytest.FixtureRequest,
    tmp_path: Path,
) -> Generator[tuple[fsspec.AbstractFileSystem, str]]:
    """Fixture to provide different fsspec filesystem implementations."""
    protocol = request.param
    if protocol == "file":
        fs = fsspec.filesystem("file")
        root = str(tmp_path / "data")
        yield fs, root
        # Cleanup handled by tmp_path
    else:
        fs = fsspec.filesystem("memory")
        root = f"/anniversary-{uuid.uuid4().hex}"
        yield fs, root
        if fs.exists(root):
            fs.rm(root, recursive=True)


@pytest.fixture
def site(fs_impl: tuple[fsspec.AbstractFileSystem, str]) -> Site:
    """An initialized site on each filesystem implementation."""
    fs, root = fs_impl
    site = Site.from_root(root, fs=fs)
    site.initialize()
    return site


@pytest.fixture
def clock() -> StepClock:
    """A clock that starts on 2024-02-14 and ticks once per read."""
    return StepClock()


@pytest.fixture
def temp_data_root(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[Path]:
    """Point ``ANNIVERSARY_ROOT`` at a temporary directory."""
    root = tmp_path / "site"
    root.mkdir()
    monkeypatch.setenv("ANNIVERSARY_ROOT", str(root))
    yield root


@pytest.fixture
def test_client(temp_data_root: Path) -> Iterator[TestClient]:  # noqa: ARG001
    """Create a test client bound to the temporary data root."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def png_bytes() -> bytes:
    """Bytes standing in for an uploaded PNG."""
    return PNG_BYTES
