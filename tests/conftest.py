"""Pytest configuration and fixtures for srcverify tests."""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

TreeSpec = dict[str, str | bytes]


def write_tree(root: Path, files: TreeSpec) -> Path:
    """Materialize ``{relative_path: content}`` below ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[str, TreeSpec], Path]:
    """Build a directory tree under ``tmp_path/<name>``."""

    def _make(name: str, files: TreeSpec) -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture(autouse=True)
def _isolated_reports_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep report artifacts and tokens from the host environment out of tests."""
    monkeypatch.setenv("SRCVERIFY_REPORTS_DIR", str(tmp_path / "reports"))
    monkeypatch.delenv("SRCVERIFY_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("SRCVERIFY_LOG_LEVEL", raising=False)
