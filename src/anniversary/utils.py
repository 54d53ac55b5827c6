"""Filesystem and timestamp helpers."""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import fsspec
from fsspec.core import url_to_fs

SAFE_FILENAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def get_fs_and_path(
    path: str | Path,
    fs: fsspec.AbstractFileSystem | None = None,
) -> tuple[fsspec.AbstractFileSystem, str]:
    """Resolve ``path`` into an fsspec filesystem and a protocol-free path.

    Args:
        path: Local path or fsspec URI (``file://``, ``memory://``...).
        fs: Filesystem to use instead of inferring one from ``path``.

    Returns:
        The filesystem and the path understood by that filesystem.

    """
    path_str = str(path)
    if fs is not None:
        if "://" in path_str:
            path_str = path_str.split("://", 1)[1]
            if not path_str.startswith("/"):
                path_str = f"/{path_str}"
        return fs, path_str
    fs_obj, fs_path = url_to_fs(path_str)
    return fs_obj, fs_path


def fs_join(base: str, *parts: str) -> str:
    """Join path components with forward slashes."""
    joined = base.rstrip("/")
    for part in parts:
        joined = f"{joined}/{part.strip('/')}"
    return joined


def fs_exists(fs: fsspec.AbstractFileSystem, path: str) -> bool:
    """Return True if ``path`` exists on ``fs``."""
    return bool(fs.exists(path))


def fs_makedirs(
    fs: fsspec.AbstractFileSystem,
    path: str,
    *,
    exist_ok: bool = True,
) -> None:
    """Create ``path`` and any missing parents."""
    fs.makedirs(path, exist_ok=exist_ok)


def fs_read_json(fs: fsspec.AbstractFileSystem, path: str) -> Any:  # noqa: ANN401
    """Read and decode a JSON document."""
    with fs.open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def fs_write_json(
    fs: fsspec.AbstractFileSystem,
    path: str,
    payload: Any,  # noqa: ANN401
) -> None:
    """Encode ``payload`` as indented JSON and overwrite ``path``."""
    with fs.open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def validate_filename(filename: str) -> str:
    """Validate that a stored filename cannot escape its directory.

    Args:
        filename: Bare filename as recorded on a photo or letter.

    Returns:
        The validated filename (a safe copy).

    Raises:
        ValueError: If the name is empty or contains path components.

    """
    if (
        not isinstance(filename, str)
        or not filename
        or ".." in filename
        or not SAFE_FILENAME_PATTERN.match(filename)
    ):
        msg = f"Invalid filename: {filename}"
        raise ValueError(msg)
    return filename


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def epoch_millis(moment: datetime) -> int:
    """Return ``moment`` as milliseconds since the Unix epoch."""
    return int(moment.timestamp() * 1000)


def isoformat_z(moment: datetime) -> str:
    """Format ``moment`` like ``2024-02-14T09:30:00.000Z``."""
    utc_moment = moment.astimezone(UTC)
    return utc_moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:  # noqa: ANN401
    """Parse a stored ISO timestamp, falling back to the epoch when invalid."""
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return EPOCH
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
    return EPOCH
