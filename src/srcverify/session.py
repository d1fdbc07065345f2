"""Drive one verification: discover, resolve, retrieve, reconcile."""

from __future__ import annotations

import tempfile
import time
from pathlib import Path

from srcverify.config import VerifyConfig
from srcverify.diagnostics import DiagnosticSink, NullSink
from srcverify.errors import RepositoryNotFound, TagNotFound, VerifyError
from srcverify.reconcile.engine import compare_trees
from srcverify.reconcile.textdiff import TextDiffer, make_differ
from srcverify.report import (
    STATUS_DIFFERENCES,
    STATUS_ERRORED,
    STATUS_MATCHING,
    STATUS_SOURCE_NOT_FOUND,
    VerificationReport,
    make_timestamp,
)
from srcverify.retrieval.base import (
    ArtifactSource,
    RepositoryLocator,
    RepositoryRef,
    SourceArchive,
    TagSource,
)
from srcverify.retrieval.github import GitHubClient
from srcverify.retrieval.rubygems import RubyGemsClient
from srcverify.rules.patterns import artifact_rules, source_rules
from srcverify.tags.resolver import TagResolver

SOURCE_NOT_FOUND_ERRORS = (TagNotFound, RepositoryNotFound)


def status_for_error(exc: BaseException) -> str:
    """Map a failure to ``source_not_found`` or ``errored``."""
    return STATUS_SOURCE_NOT_FOUND if isinstance(exc, SOURCE_NOT_FOUND_ERRORS) else STATUS_ERRORED


class VerificationSession:
    """Per-configuration verifier; each call works in its own temporary tree."""

    def __init__(
        self,
        config: VerifyConfig,
        *,
        artifact_source: ArtifactSource,
        tag_source: TagSource,
        source_archive: SourceArchive,
        locator: RepositoryLocator,
        differ: TextDiffer | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.config = config
        self.artifact_source = artifact_source
        self.tag_source = tag_source
        self.source_archive = source_archive
        self.locator = locator
        self.differ = differ or make_differ(config.diff_backend)
        self.sink = sink or NullSink()
        self.artifact_rules = artifact_rules(config.ignore_artifact)
        self.source_rules = source_rules(config.ignore_source)
        self.resolver = TagResolver(sink=self.sink)

    @classmethod
    def from_config(cls, config: VerifyConfig, *, sink: DiagnosticSink | None = None) -> VerificationSession:
        """Wire the RubyGems and GitHub collaborators."""
        rubygems = RubyGemsClient(timeout=config.http_timeout, sink=sink)
        github = GitHubClient(token=config.github_token, timeout=config.http_timeout, sink=sink)
        return cls(
            config,
            artifact_source=rubygems,
            tag_source=github,
            source_archive=github,
            locator=rubygems,
            sink=sink,
        )

    def verify(self, package: str, version: str, *, repository: RepositoryRef | None = None) -> VerificationReport:
        """Verify a published package version against its tagged source.

        Tag and retrieval failures do not raise; they come back as a report
        whose status is ``source_not_found`` or ``errored``.
        """
        started = time.monotonic()
        repo = repository
        tag = None
        try:
            if repo is None:
                repo = self.locator.locate(package)
            tags = self.tag_source.list_tags(repo)
            tag = self.resolver.resolve(package, version, tags)
            with tempfile.TemporaryDirectory(prefix="srcverify-") as tmp:
                work = Path(tmp)
                artifact_dir = self.artifact_source.fetch_artifact(package, version, work / "artifact")
                source_dir = self.source_archive.fetch_source(repo, tag.name, work / "source")
                result = compare_trees(
                    artifact_dir,
                    source_dir,
                    self.artifact_rules,
                    self.source_rules,
                    differ=self.differ,
                    sink=self.sink,
                    workers=self.config.diff_workers,
                )
        except VerifyError as exc:
            status = status_for_error(exc)
            self.sink.warning(f"{package} {version}: {status}: {exc}")
            return VerificationReport(
                package=package,
                version=version,
                status=status,
                tag=tag.name if tag else None,
                tag_strategy=tag.strategy if tag else None,
                repository=str(repo) if repo else None,
                generated_at=make_timestamp(self.config.timestamp_mode),
                timestamp_mode=self.config.timestamp_mode,
                duration_seconds=time.monotonic() - started,
                error=str(exc),
                error_code=exc.reason_code,
            )

        return VerificationReport(
            package=package,
            version=version,
            status=STATUS_MATCHING if result.identical else STATUS_DIFFERENCES,
            classification=result,
            tag=tag.name,
            tag_strategy=tag.strategy,
            repository=str(repo),
            generated_at=make_timestamp(self.config.timestamp_mode),
            timestamp_mode=self.config.timestamp_mode,
            duration_seconds=time.monotonic() - started,
        )


def verify_local(
    artifact_dir: Path,
    source_dir: Path,
    config: VerifyConfig,
    *,
    differ: TextDiffer | None = None,
    sink: DiagnosticSink | None = None,
) -> VerificationReport:
    """Compare two local directories with the configured rule sets."""
    for label, path in (("Artifact", artifact_dir), ("Source", source_dir)):
        if not path.exists():
            raise VerifyError(f"{label} path does not exist: {path}")

    started = time.monotonic()
    result = compare_trees(
        artifact_dir,
        source_dir,
        artifact_rules(config.ignore_artifact),
        source_rules(config.ignore_source),
        differ=differ or make_differ(config.diff_backend),
        sink=sink,
        workers=config.diff_workers,
    )
    return VerificationReport(
        package=None,
        version=None,
        status=STATUS_MATCHING if result.identical else STATUS_DIFFERENCES,
        classification=result,
        generated_at=make_timestamp(config.timestamp_mode),
        timestamp_mode=config.timestamp_mode,
        duration_seconds=time.monotonic() - started,
    )
