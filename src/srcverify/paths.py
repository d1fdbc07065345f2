"""Default locations for report artifacts."""

from __future__ import annotations

import os
from pathlib import Path

SYSTEM_TMP = Path("/tmp")


def _tmp_writable() -> bool:
    return SYSTEM_TMP.is_dir() and os.access(SYSTEM_TMP, os.W_OK)


def determine_reports_directory() -> Path:
    """Prefer /tmp when writable, otherwise ./tmp/reports."""
    if _tmp_writable():
        return SYSTEM_TMP / "srcverify-reports"
    return Path("./tmp/reports")


def report_slug(package: str | None, version: str | None) -> str:
    """Filesystem-safe name for one verification's report directory."""
    raw = f"{package or 'local'}-{version or 'tree'}"
    return "".join(ch if ch.isalnum() or ch in "._-" else "_" for ch in raw)
