"""Verify many packages in parallel, isolating each run's failures."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from srcverify.diagnostics import DiagnosticSink, NullSink
from srcverify.lockfile import LockedGem
from srcverify.report import (
    STATUS_DIFFERENCES,
    STATUS_ERRORED,
    STATUS_MATCHING,
    STATUS_SOURCE_NOT_FOUND,
    VerificationReport,
    make_timestamp,
)
from srcverify.session import VerificationSession

STATUS_ORDER: tuple[str, ...] = (
    STATUS_MATCHING,
    STATUS_DIFFERENCES,
    STATUS_SOURCE_NOT_FOUND,
    STATUS_ERRORED,
)


@dataclass(frozen=True)
class BatchSummary:
    """Reports in input order plus per-status counts."""

    reports: tuple[VerificationReport, ...]

    @property
    def counts(self) -> dict[str, int]:
        tally = Counter(report.status for report in self.reports)
        return {status: tally.get(status, 0) for status in STATUS_ORDER}

    @property
    def has_differences(self) -> bool:
        return any(report.status == STATUS_DIFFERENCES for report in self.reports)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": len(self.reports),
            "counts": self.counts,
            "reports": [report.to_dict() for report in self.reports],
        }


def verify_batch(
    session: VerificationSession,
    gems: Sequence[LockedGem],
    *,
    workers: int = 1,
    on_result: Callable[[int, VerificationReport], None] | None = None,
    sink: DiagnosticSink | None = None,
) -> BatchSummary:
    """Verify every gem; one failing gem never aborts the batch.

    ``on_result`` is called with the gem's input index as each run finishes,
    in completion order.
    """
    sink = sink or NullSink()
    results: list[VerificationReport | None] = [None] * len(gems)

    def _run(gem: LockedGem) -> VerificationReport:
        try:
            return session.verify(gem.name, gem.version)
        except Exception as exc:  # noqa: BLE001 - isolate one package from the batch
            sink.error(f"{gem.name} {gem.version}: unexpected failure: {exc!r}")
            return VerificationReport(
                package=gem.name,
                version=gem.version,
                status=STATUS_ERRORED,
                generated_at=make_timestamp(session.config.timestamp_mode),
                timestamp_mode=session.config.timestamp_mode,
                error=str(exc) or type(exc).__name__,
                error_code=type(exc).__name__,
            )

    sink.info(f"verifying {len(gems)} gem(s) with {max(workers, 1)} worker(s)")
    with ThreadPoolExecutor(max_workers=max(workers, 1)) as pool:
        futures = {pool.submit(_run, gem): index for index, gem in enumerate(gems)}
        for future in as_completed(futures):
            index = futures[future]
            report = future.result()
            results[index] = report
            if on_result is not None:
                on_result(index, report)

    return BatchSummary(reports=tuple(r for r in results if r is not None))
