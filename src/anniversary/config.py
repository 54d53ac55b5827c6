"""Configuration settings."""

import os
from pathlib import Path

DEFAULT_ALLOW_ORIGIN = "http://localhost:3000"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def get_root_path() -> str:
    """Get the data root holding the JSON stores and image folders."""
    return os.environ.get("ANNIVERSARY_ROOT") or str(Path.cwd())


def get_allow_origins() -> list[str]:
    """Get the CORS origins allowed to call the API."""
    raw = os.environ.get("ALLOW_ORIGIN") or DEFAULT_ALLOW_ORIGIN
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_max_upload_bytes() -> int:
    """Get the per-file upload limit in bytes."""
    raw = os.environ.get("ANNIVERSARY_MAX_UPLOAD_BYTES")
    if not raw:
        return DEFAULT_MAX_UPLOAD_BYTES
    try:
        value = int(raw)
    except ValueError as e:
        msg = f"ANNIVERSARY_MAX_UPLOAD_BYTES must be an integer, got {raw!r}"
        raise ValueError(msg) from e
    if value <= 0:
        msg = f"ANNIVERSARY_MAX_UPLOAD_BYTES must be positive, got {value}"
        raise ValueError(msg)
    return value


def get_static_dir() -> Path | None:
    """Get the directory holding the built front-end, if one is configured."""
    raw = os.environ.get("ANNIVERSARY_STATIC_DIR")
    return Path(raw) if raw else None
