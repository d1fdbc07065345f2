"""Verification report record handed from the core to reporting."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any

from srcverify.reconcile.types import ClassificationResult, PathError, build_summary
from srcverify.schemas.validator import validate_data

REPORT_SCHEMA_NAME = "verification_report"
REPORT_SCHEMA_VERSION = "1.0"
DETERMINISTIC_TIMESTAMP = "1970-01-01T00:00:00Z"

STATUS_MATCHING = "matching"
STATUS_DIFFERENCES = "differences"
STATUS_SOURCE_NOT_FOUND = "source_not_found"
STATUS_ERRORED = "errored"
VERIFIED_STATUSES: tuple[str, ...] = (STATUS_MATCHING, STATUS_DIFFERENCES)


def make_timestamp(timestamp_mode: str) -> str:
    if timestamp_mode == "deterministic":
        return DETERMINISTIC_TIMESTAMP
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class VerificationReport:
    """Outcome of one verification: a classification or a structured failure."""

    package: str | None
    version: str | None
    status: str
    classification: ClassificationResult | None = None
    tag: str | None = None
    tag_strategy: str | None = None
    repository: str | None = None
    generated_at: str = DETERMINISTIC_TIMESTAMP
    timestamp_mode: str = "deterministic"
    duration_seconds: float = 0.0
    error: str | None = None
    error_code: str | None = None
    diff_file: str | None = None

    @property
    def verified(self) -> bool:
        return self.status in VERIFIED_STATUSES

    @property
    def identical(self) -> bool:
        return self.classification is not None and self.classification.identical

    @property
    def summary(self) -> str | None:
        return self.classification.summary if self.classification else None

    @property
    def diff(self) -> str:
        return self.classification.diff if self.classification else ""

    def with_diff_file(self, diff_file: str | None) -> VerificationReport:
        return replace(self, diff_file=diff_file)

    def to_dict(self) -> dict[str, Any]:
        result = self.classification
        artifact_only = list(result.artifact_only) if result else []
        source_only = list(result.source_only) if result else []
        modified = list(result.modified) if result else []
        return {
            "schema_version": REPORT_SCHEMA_VERSION,
            "package": self.package,
            "version": self.version,
            "tag": self.tag,
            "tag_strategy": self.tag_strategy,
            "repository": self.repository,
            "status": self.status,
            "generated_at": self.generated_at,
            "timestamp_mode": self.timestamp_mode,
            "duration_seconds": round(self.duration_seconds, 3),
            "error": self.error,
            "error_code": self.error_code,
            "identical": self.identical,
            "summary": self.summary,
            "diff_file": self.diff_file,
            "statistics": {
                "artifact_only": len(artifact_only),
                "source_only": len(source_only),
                "modified": len(modified),
                "total_differences": len(artifact_only) + len(source_only) + len(modified),
            },
            "files": {
                "artifact_only": artifact_only,
                "source_only": source_only,
                "modified": modified,
            },
            "path_errors": [err.to_dict() for err in result.path_errors] if result else [],
        }


def report_from_dict(payload: dict[str, Any], *, diff: str = "") -> VerificationReport:
    """Rebuild a report from its JSON payload; the diff text travels separately."""
    validate_data(payload, REPORT_SCHEMA_NAME)

    stats = payload["statistics"]
    files = payload["files"]
    if stats["total_differences"] != stats["artifact_only"] + stats["source_only"] + stats["modified"]:
        raise ValueError("statistics.total_differences does not equal the sum of category counts")
    for key in ("artifact_only", "source_only", "modified"):
        if stats[key] != len(files[key]):
            raise ValueError(f"statistics.{key} does not match files.{key}")

    classification = None
    if payload["status"] in VERIFIED_STATUSES:
        artifact_only = tuple(files["artifact_only"])
        source_only = tuple(files["source_only"])
        modified = tuple(files["modified"])
        classification = ClassificationResult(
            identical=bool(payload["identical"]),
            artifact_only=artifact_only,
            source_only=source_only,
            modified=modified,
            diff=diff,
            summary=payload["summary"] or build_summary(len(artifact_only), len(source_only), len(modified)),
            path_errors=tuple(
                PathError(path=err["path"], reason_code=err["reason_code"], message=err["message"])
                for err in payload.get("path_errors", [])
            ),
        )

    return VerificationReport(
        package=payload["package"],
        version=payload["version"],
        status=payload["status"],
        classification=classification,
        tag=payload.get("tag"),
        tag_strategy=payload.get("tag_strategy"),
        repository=payload.get("repository"),
        generated_at=payload["generated_at"],
        timestamp_mode=payload["timestamp_mode"],
        duration_seconds=float(payload.get("duration_seconds", 0.0)),
        error=payload.get("error"),
        error_code=payload.get("error_code"),
        diff_file=payload.get("diff_file"),
    )


def render_report_text(report: VerificationReport) -> str:
    """Plain-text rendering of a single report."""
    lines: list[str] = []
    if report.package and report.version:
        lines.append("=== Source Verification Report ===")
        lines.append(f"Package: {report.package} ({report.version})")
        if report.tag:
            lines.append(f"Tag: {report.tag}")
        if report.repository:
            lines.append(f"Repository: {report.repository}")
        lines.append(f"Timestamp: {report.generated_at}")
        lines.append("")

    if not report.verified:
        lines.append(f"Could not verify ({report.status}): {report.error}")
        return "\n".join(lines)

    result = report.classification
    assert result is not None
    lines.append(result.summary)
    lines.append("")
    if not result.identical:
        for title, marker, paths in (
            ("Files only in artifact", "+", result.artifact_only),
            ("Files only in source", "-", result.source_only),
            ("Modified files", "~", result.modified),
        ):
            if not paths:
                continue
            lines.append(f"{title} ({len(paths)}):")
            lines.extend(f"  {marker} {path}" for path in paths)
            lines.append("")
        if result.path_errors:
            lines.append(f"Paths not compared ({len(result.path_errors)}):")
            lines.extend(f"  ! {err.path}: {err.message}" for err in result.path_errors)
            lines.append("")
        if report.diff_file:
            lines.append(f"Detailed diff saved to: {report.diff_file}")
    return "\n".join(lines).rstrip("\n")
