"""Deterministic report artifacts: canonical JSON, diff file and index."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from srcverify.report import VerificationReport

ARTIFACT_INDEX_SCHEMA_VERSION = "srcverify.report.v1"
REPORT_FILENAME = "REPORT.json"
DIFF_FILENAME = "COMPARISON.diff"
INDEX_FILENAME = "ARTIFACT_INDEX.json"


def canonical_dumps(obj: Any) -> str:
    """Serialize a JSON-compatible object with stable canonical formatting."""
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def printable(text: str) -> str:
    """Replace surrogate-escaped bytes from undecodable file names with ``\\udcXX``."""
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def write_json(path: Path, obj: Any) -> None:
    """Write canonical JSON as UTF-8.

    Lone surrogates become ``\\udcXX`` JSON escapes, so the file stays valid
    UTF-8 and loads back to the same path strings.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(printable(canonical_dumps(obj)), encoding="utf-8")


def sha256_file(path: Path) -> str:
    """Compute SHA-256 for file bytes."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        while True:
            chunk = handle.read(65536)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def write_report_artifacts(out_dir: Path, report: VerificationReport) -> VerificationReport:
    """Write REPORT.json, COMPARISON.diff (when non-empty) and ARTIFACT_INDEX.json.

    Returns the report with ``diff_file`` pointing at the written diff.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    artifacts: list[tuple[str, Path]] = []

    if report.diff:
        diff_path = out_dir / DIFF_FILENAME
        # undecodable file names are written back as their original bytes
        diff_path.write_text(report.diff, encoding="utf-8", errors="surrogateescape")
        report = report.with_diff_file(str(diff_path))
        artifacts.append((DIFF_FILENAME, diff_path))

    report_path = out_dir / REPORT_FILENAME
    write_json(report_path, report.to_dict())
    artifacts.insert(0, (REPORT_FILENAME, report_path))

    index_payload: dict[str, Any] = {
        "schema_version": ARTIFACT_INDEX_SCHEMA_VERSION,
        "artifacts": [
            {
                "name": artifact_name,
                "path": artifact_name,
                "sha256": sha256_file(artifact_path),
            }
            for artifact_name, artifact_path in artifacts
        ],
    }
    write_json(out_dir / INDEX_FILENAME, index_payload)
    return report
