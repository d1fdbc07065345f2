"""Reconcile an artifact tree against a source tree.

Both trees are filtered through their own rule sets before anything is
diffed, so an ignored path can never surface in any output category.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from srcverify.diagnostics import DiagnosticSink, NullSink
from srcverify.errors import ComparisonIOError, VerifyError
from srcverify.reconcile.textdiff import TextDiffer, UnifiedDiffer
from srcverify.reconcile.types import ClassificationResult, PathError, build_summary
from srcverify.rules.tree import comparable_files
from srcverify.rules.types import RuleSet

BLOCK_HEADER = "diff a/{path} b/{path}\n"


@dataclass(frozen=True)
class _PathOutcome:
    path: str
    modified: bool
    block: str
    error: PathError | None = None


def compare_trees(
    artifact_root: Path,
    source_root: Path,
    artifact_rules: RuleSet,
    source_rules: RuleSet,
    *,
    differ: TextDiffer | None = None,
    sink: DiagnosticSink | None = None,
    workers: int = 1,
) -> ClassificationResult:
    """Classify every comparable path as artifact-only, source-only or modified."""
    sink = sink or NullSink()
    differ = differ or UnifiedDiffer()

    artifact_paths = set(comparable_files(Path(artifact_root), artifact_rules, sink=sink))
    source_paths = set(comparable_files(Path(source_root), source_rules, sink=sink))

    artifact_only = tuple(sorted(artifact_paths - source_paths))
    source_only = tuple(sorted(source_paths - artifact_paths))
    shared = sorted(artifact_paths & source_paths)

    def _diff(path: str) -> _PathOutcome:
        return _compare_path(Path(artifact_root), Path(source_root), path, differ, sink)

    if workers > 1 and len(shared) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(_diff, shared))
        outcomes.sort(key=lambda outcome: outcome.path)
    else:
        outcomes = [_diff(path) for path in shared]

    modified = tuple(outcome.path for outcome in outcomes if outcome.modified)
    diff = "".join(outcome.block for outcome in outcomes if outcome.modified)
    path_errors = tuple(outcome.error for outcome in outcomes if outcome.error is not None)

    identical = not (artifact_only or source_only or modified)
    summary = build_summary(len(artifact_only), len(source_only), len(modified))
    sink.info(
        f"compared {len(shared)} shared file(s): {len(artifact_only)} artifact-only, "
        f"{len(source_only)} source-only, {len(modified)} modified"
    )
    return ClassificationResult(
        identical=identical,
        artifact_only=artifact_only,
        source_only=source_only,
        modified=modified,
        diff=diff,
        summary=summary,
        path_errors=path_errors,
    )


def _compare_path(
    artifact_root: Path,
    source_root: Path,
    path: str,
    differ: TextDiffer,
    sink: DiagnosticSink,
) -> _PathOutcome:
    header = BLOCK_HEADER.format(path=path)
    try:
        artifact_bytes = (artifact_root / path).read_bytes()
        source_bytes = (source_root / path).read_bytes()
    except OSError as exc:
        return _failed(path, header, f"read failed: {exc.strerror or exc}", sink)

    if artifact_bytes == source_bytes:
        return _PathOutcome(path=path, modified=False, block="")

    try:
        body = differ.diff(path, artifact_bytes, source_bytes)
    except (VerifyError, OSError, ValueError) as exc:
        return _failed(path, header, f"{differ.name} diff failed: {exc}", sink)

    if not body:
        body = f"Files a/{path} and b/{path} differ\n"
    return _PathOutcome(path=path, modified=True, block=header + body)


def _failed(path: str, header: str, detail: str, sink: DiagnosticSink) -> _PathOutcome:
    error = ComparisonIOError(path, detail)
    sink.warning(f"content comparison skipped, reporting as modified: {error}")
    return _PathOutcome(
        path=path,
        modified=True,
        block=f"{header}Comparison failed for {path}: {detail}\n",
        error=PathError(path=path, reason_code=error.reason_code, message=detail),
    )
