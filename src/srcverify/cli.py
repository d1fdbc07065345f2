"""srcverify CLI - verify published gems against their tagged source."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from srcverify import __version__
from srcverify.artifacts import printable, write_report_artifacts
from srcverify.batch import verify_batch
from srcverify.config import DIFF_BACKENDS, TIMESTAMP_MODES, VerifyConfig, load_config
from srcverify.diagnostics import LOGGER_NAME, LoggingSink
from srcverify.errors import TagNotFound, VerifyError
from srcverify.lockfile import load_lockfile
from srcverify.paths import report_slug
from srcverify.report import (
    STATUS_DIFFERENCES,
    STATUS_ERRORED,
    STATUS_MATCHING,
    STATUS_SOURCE_NOT_FOUND,
    VerificationReport,
    render_report_text,
)
from srcverify.retrieval.base import RepositoryRef
from srcverify.session import VerificationSession, verify_local
from srcverify.tags.resolver import resolve_tag

EXIT_MATCHING = 0
EXIT_DIFFERENCES = 1
EXIT_UNVERIFIED = 2

ENV_LOG_LEVEL = "SRCVERIFY_LOG_LEVEL"
ENV_COLOR = "SRCVERIFY_COLOR"

cli = typer.Typer(
    name="srcverify",
    help="srcverify - check that published gems match their tagged source",
    no_args_is_help=True,
)
console = Console(no_color=os.getenv(ENV_COLOR, "1") == "0")

STATUS_STYLES: dict[str, tuple[str, str]] = {
    STATUS_MATCHING: ("✓", "bold green"),
    STATUS_DIFFERENCES: ("⚠", "bold red"),
    STATUS_SOURCE_NOT_FOUND: ("?", "bold yellow"),
    STATUS_ERRORED: ("✗", "bold red"),
}


def configure_logging(level: str) -> None:
    """Attach a rich handler to the srcverify logger."""
    logger = logging.getLogger(LOGGER_NAME)
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise typer.BadParameter(f"Unknown log level: {level}", param_hint="--log-level")
    logger.setLevel(numeric)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show srcverify version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar=ENV_LOG_LEVEL,
        help="Diagnostics level: DEBUG, INFO, WARNING or ERROR.",
    ),
) -> None:
    """Verify that a published gem's contents match the tagged source it claims."""
    _ = version
    configure_logging(log_level)


def _load_config(
    config_path: Path | None,
    *,
    ignore_source: list[str] | None = None,
    ignore_artifact: list[str] | None = None,
    diff_backend: str | None = None,
    timestamp_mode: str | None = None,
    workers: int | None = None,
) -> VerifyConfig:
    try:
        config = load_config(config_path)
    except VerifyError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(EXIT_UNVERIFIED) from exc
    if diff_backend is not None and diff_backend not in DIFF_BACKENDS:
        raise typer.BadParameter(f"expected one of: {', '.join(DIFF_BACKENDS)}", param_hint="--diff-backend")
    if timestamp_mode is not None and timestamp_mode not in TIMESTAMP_MODES:
        raise typer.BadParameter(f"expected one of: {', '.join(TIMESTAMP_MODES)}", param_hint="--timestamp-mode")
    return config.with_overrides(
        ignore_source=ignore_source or (),
        ignore_artifact=ignore_artifact or (),
        diff_backend=diff_backend,
        timestamp_mode=timestamp_mode,
        batch_workers=workers,
    )


def parse_repository(value: str) -> RepositoryRef:
    """Parse ``owner/name`` or ``owner/name:subdirectory``."""
    slug, _, subdirectory = value.partition(":")
    owner, sep, name = slug.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise typer.BadParameter("expected owner/name or owner/name:subdirectory", param_hint="--repo")
    return RepositoryRef(owner=owner, name=name, subdirectory=subdirectory.strip("/") or None)


def _exit_code(report: VerificationReport) -> int:
    if report.status == STATUS_MATCHING:
        return EXIT_MATCHING
    if report.status == STATUS_DIFFERENCES:
        return EXIT_DIFFERENCES
    return EXIT_UNVERIFIED


def _emit(report: VerificationReport, *, config: VerifyConfig, out: Path | None, as_json: bool) -> None:
    if out is not None or report.diff:
        target = out or config.reports_dir / report_slug(report.package, report.version)
        report = write_report_artifacts(target, report)

    if as_json:
        typer.echo(printable(json.dumps(report.to_dict(), indent=2, ensure_ascii=False)))
    else:
        console.print(printable(render_report_text(report)), markup=False, highlight=False)
    raise typer.Exit(_exit_code(report))


_IGNORE_SOURCE_HELP = "Extra source-side ignore pattern (repeatable)."
_IGNORE_ARTIFACT_HELP = "Extra artifact-side ignore pattern (repeatable)."


@cli.command("verify")
def verify_cmd(
    name: str = typer.Argument(..., help="Gem name."),
    version: str = typer.Argument(..., help="Published version to verify."),
    repo: str | None = typer.Option(None, "--repo", help="Source repository as owner/name[:subdirectory]."),
    ignore_source: list[str] = typer.Option([], "--ignore-source", help=_IGNORE_SOURCE_HELP),
    ignore_artifact: list[str] = typer.Option([], "--ignore-artifact", help=_IGNORE_ARTIFACT_HELP),
    diff_backend: str | None = typer.Option(None, "--diff-backend", help="difflib or git."),
    timestamp_mode: str | None = typer.Option(None, "--timestamp-mode", help="deterministic or wallclock."),
    config_path: Path | None = typer.Option(None, "--config", help="Path to a srcverify YAML config."),
    out: Path | None = typer.Option(None, "--out", help="Directory for REPORT.json and COMPARISON.diff."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Download a gem and its tagged source, then reconcile them."""
    repository = parse_repository(repo) if repo else None
    config = _load_config(
        config_path,
        ignore_source=ignore_source,
        ignore_artifact=ignore_artifact,
        diff_backend=diff_backend,
        timestamp_mode=timestamp_mode,
    )
    sink = LoggingSink()
    session = VerificationSession.from_config(config, sink=sink)
    report = session.verify(name, version, repository=repository)
    _emit(report, config=config, out=out, as_json=as_json)


@cli.command("local")
def local_cmd(
    artifact_dir: Path = typer.Argument(..., help="Unpacked artifact directory."),
    source_dir: Path = typer.Argument(..., help="Source checkout directory."),
    ignore_source: list[str] = typer.Option([], "--ignore-source", help=_IGNORE_SOURCE_HELP),
    ignore_artifact: list[str] = typer.Option([], "--ignore-artifact", help=_IGNORE_ARTIFACT_HELP),
    diff_backend: str | None = typer.Option(None, "--diff-backend", help="difflib or git."),
    timestamp_mode: str | None = typer.Option(None, "--timestamp-mode", help="deterministic or wallclock."),
    config_path: Path | None = typer.Option(None, "--config", help="Path to a srcverify YAML config."),
    out: Path | None = typer.Option(None, "--out", help="Directory for REPORT.json and COMPARISON.diff."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Reconcile two local directories."""
    config = _load_config(
        config_path,
        ignore_source=ignore_source,
        ignore_artifact=ignore_artifact,
        diff_backend=diff_backend,
        timestamp_mode=timestamp_mode,
    )
    try:
        report = verify_local(artifact_dir, source_dir, config, sink=LoggingSink())
    except VerifyError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(EXIT_UNVERIFIED) from exc
    _emit(report, config=config, out=out, as_json=as_json)


@cli.command("resolve-tag")
def resolve_tag_cmd(
    project: str = typer.Argument(..., help="Project or gem name."),
    version: str = typer.Argument(..., help="Requested version."),
    tags: list[str] = typer.Argument(..., help="Available tag names, in listing order."),
) -> None:
    """Resolve a version against a tag list without touching the network."""
    try:
        tag = resolve_tag(project, version, tags, sink=LoggingSink())
    except TagNotFound as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(EXIT_UNVERIFIED) from exc
    typer.echo(f"tag={tag.name}")
    typer.echo(f"strategy={tag.strategy}")


@cli.command("bundle")
def bundle_cmd(
    lockfile: Path = typer.Option(Path("Gemfile.lock"), "--lockfile", help="Bundler lockfile to read."),
    workers: int | None = typer.Option(None, "--workers", min=1, help="Parallel verifications."),
    ignore_source: list[str] = typer.Option([], "--ignore-source", help=_IGNORE_SOURCE_HELP),
    ignore_artifact: list[str] = typer.Option([], "--ignore-artifact", help=_IGNORE_ARTIFACT_HELP),
    config_path: Path | None = typer.Option(None, "--config", help="Path to a srcverify YAML config."),
    out: Path | None = typer.Option(None, "--out", help="Write per-gem report artifacts below this directory."),
    as_json: bool = typer.Option(False, "--json", help="Print the batch summary as JSON."),
) -> None:
    """Verify every gem pinned in a Gemfile.lock."""
    config = _load_config(
        config_path,
        ignore_source=ignore_source,
        ignore_artifact=ignore_artifact,
        workers=workers,
    )
    try:
        gems = load_lockfile(lockfile)
    except VerifyError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(EXIT_UNVERIFIED) from exc

    sink = LoggingSink()
    session = VerificationSession.from_config(config, sink=sink)
    if not as_json:
        console.print(Text(f"Found {len(gems)} gems to analyze...", style="bold"))

    def _progress(index: int, report: VerificationReport) -> None:
        if as_json:
            return
        symbol, style = STATUS_STYLES[report.status]
        line = Text()
        line.append(f"{symbol} ", style=style)
        line.append(f"{report.package} {report.version} ")
        line.append(f"({index + 1}/{len(gems)}) ", style="dim")
        line.append(report.status, style=style)
        console.print(line)

    summary = verify_batch(session, gems, workers=config.batch_workers, on_result=_progress, sink=sink)

    if out is not None:
        for report in summary.reports:
            write_report_artifacts(out / report_slug(report.package, report.version), report)

    if as_json:
        typer.echo(printable(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False)))
    else:
        console.print()
        console.print(Text("=== Summary ===", style="bold"))
        console.print(f"Total gems: {len(summary.reports)}", markup=False)
        labels = {
            STATUS_MATCHING: "Matching",
            STATUS_DIFFERENCES: "Differences detected",
            STATUS_SOURCE_NOT_FOUND: "Source not found",
            STATUS_ERRORED: "Errored",
        }
        for status, count in summary.counts.items():
            if not count:
                continue
            symbol, style = STATUS_STYLES[status]
            console.print(Text(f"{symbol} {labels[status]}: {count}", style=style))

    raise typer.Exit(EXIT_DIFFERENCES if summary.has_differences else EXIT_MATCHING)
