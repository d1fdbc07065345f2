"""Reconciliation result types."""

from __future__ import annotations

from dataclasses import dataclass

IDENTICAL_SUMMARY = "Artifact and source are identical"


@dataclass(frozen=True)
class PathError:
    """A path whose content comparison failed and was classified conservatively."""

    path: str
    reason_code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "reason_code": self.reason_code, "message": self.message}


@dataclass(frozen=True)
class ClassificationResult:
    """Three-way classification of two filtered file trees."""

    identical: bool
    artifact_only: tuple[str, ...]
    source_only: tuple[str, ...]
    modified: tuple[str, ...]
    diff: str
    summary: str
    path_errors: tuple[PathError, ...] = ()

    @property
    def total_differences(self) -> int:
        return len(self.artifact_only) + len(self.source_only) + len(self.modified)


def build_summary(artifact_only: int, source_only: int, modified: int) -> str:
    """Render the fixed-format summary for the given category counts."""
    if not (artifact_only or source_only or modified):
        return IDENTICAL_SUMMARY
    lines = []
    if artifact_only:
        lines.append(f"{artifact_only} file(s) only in artifact")
    if source_only:
        lines.append(f"{source_only} file(s) only in source")
    if modified:
        lines.append(f"{modified} file(s) modified")
    return "\n".join(lines)
