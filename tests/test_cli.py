"""Tests for CLI commands."""

import json
from pathlib import Path
from typing import Any

import pytest
import uvicorn
from typer.testing import CliRunner

from anniversary.assets import Upload
from anniversary.cli import app
from anniversary.site import Site

runner = CliRunner()


def test_cli_init(tmp_path: Path) -> None:
    """``init`` creates the stores and image folders."""
    root = tmp_path / "site"
    result = runner.invoke(app, ["init", "--root", str(root)])

    assert result.exit_code == 0
    assert "Data root ready" in result.stdout
    assert json.loads((root / "letters.json").read_text(encoding="utf-8")) == []
    assert (root / "pic").is_dir()


def test_cli_lists_records(tmp_path: Path, png_bytes: bytes) -> None:
    """Listing commands print JSON in display order."""
    root = tmp_path / "site"
    site = Site.from_root(root)
    site.initialize()
    site.notes.create("plain", "memory")
    pinned = site.notes.create("pinned", "joke", pinned=True)
    site.photos.create([Upload(png_bytes, "a.png", "image/png")])
    site.letters.create_text("Hello", "there")

    notes = runner.invoke(app, ["notes", "--root", str(root)])
    assert notes.exit_code == 0
    assert [n["content"] for n in json.loads(notes.stdout)] == ["pinned", "plain"]

    jokes = runner.invoke(app, ["notes", "--root", str(root), "--tag", "joke"])
    assert [n["id"] for n in json.loads(jokes.stdout)] == [pinned["id"]]

    photos = runner.invoke(app, ["photos", "--root", str(root)])
    assert len(json.loads(photos.stdout)) == 1

    letters = runner.invoke(app, ["letters", "--root", str(root)])
    assert json.loads(letters.stdout)[0]["title"] == "Hello"


def test_cli_uses_environment_root(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Without ``--root`` the data root comes from ``ANNIVERSARY_ROOT``."""
    monkeypatch.setenv("ANNIVERSARY_ROOT", str(tmp_path))
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0
    assert (tmp_path / "photos.json").exists()


def test_cli_reports_bad_configuration(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Configuration errors exit with status 1 and a message."""
    monkeypatch.setenv("ANNIVERSARY_MAX_UPLOAD_BYTES", "lots")
    result = runner.invoke(app, ["photos", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_cli_serve_runs_uvicorn(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """``serve`` hands the app to uvicorn with the chosen bind address."""
    calls: list[dict[str, Any]] = []

    def fake_run(target: str, **kwargs: Any) -> None:  # noqa: ANN401
        calls.append({"target": target, **kwargs})

    monkeypatch.setattr(uvicorn, "run", fake_run)
    monkeypatch.setenv("ANNIVERSARY_ROOT", "unused")
    host = "0.0.0.0"  # noqa: S104
    result = runner.invoke(
        app,
        ["serve", "--root", str(tmp_path), "--host", host, "--port", "8080"],
    )

    assert result.exit_code == 0
    assert calls == [
        {
            "target": "anniversary.main:app",
            "host": host,
            "port": 8080,
            "reload": False,
        },
    ]
