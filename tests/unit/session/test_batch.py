"""Unit tests for batch verification."""

from __future__ import annotations

import threading

from srcverify.batch import BatchSummary, verify_batch
from srcverify.config import VerifyConfig
from srcverify.lockfile import LockedGem
from srcverify.report import VerificationReport


class FakeSession:
    def __init__(self, outcomes: dict[str, str | Exception]) -> None:
        self.config = VerifyConfig(timestamp_mode="deterministic")
        self.outcomes = outcomes
        self.lock = threading.Lock()
        self.seen: list[str] = []

    def verify(self, package: str, version: str) -> VerificationReport:
        with self.lock:
            self.seen.append(package)
        outcome = self.outcomes[package]
        if isinstance(outcome, Exception):
            raise outcome
        return VerificationReport(package=package, version=version, status=outcome)


GEMS = [
    LockedGem("alpha", "1.0.0"),
    LockedGem("beta", "2.0.0"),
    LockedGem("gamma", "3.0.0"),
    LockedGem("delta", "4.0.0"),
]


def test_reports_keep_input_order() -> None:
    session = FakeSession(
        {"alpha": "matching", "beta": "differences", "gamma": "source_not_found", "delta": "matching"}
    )
    summary = verify_batch(session, GEMS, workers=3)
    assert [r.package for r in summary.reports] == ["alpha", "beta", "gamma", "delta"]
    assert summary.counts == {"matching": 2, "differences": 1, "source_not_found": 1, "errored": 0}
    assert summary.has_differences


def test_unexpected_exception_is_isolated() -> None:
    session = FakeSession(
        {"alpha": "matching", "beta": RuntimeError("boom"), "gamma": "matching", "delta": "matching"}
    )
    summary = verify_batch(session, GEMS, workers=2)
    beta = summary.reports[1]
    assert beta.status == "errored"
    assert beta.error == "boom"
    assert beta.error_code == "RuntimeError"
    assert sorted(session.seen) == ["alpha", "beta", "delta", "gamma"]
    assert not summary.has_differences


def test_progress_callback_sees_every_gem() -> None:
    session = FakeSession({gem.name: "matching" for gem in GEMS})
    seen: list[tuple[int, str]] = []
    verify_batch(session, GEMS, workers=1, on_result=lambda i, r: seen.append((i, r.package)))
    assert sorted(seen) == [(0, "alpha"), (1, "beta"), (2, "gamma"), (3, "delta")]


def test_summary_to_dict() -> None:
    summary = BatchSummary(reports=(VerificationReport(package="a", version="1", status="matching"),))
    payload = summary.to_dict()
    assert payload["total"] == 1
    assert payload["counts"]["matching"] == 1
    assert payload["reports"][0]["package"] == "a"


def test_empty_batch() -> None:
    summary = verify_batch(FakeSession({}), [], workers=4)
    assert summary.reports == ()
    assert not summary.has_differences
