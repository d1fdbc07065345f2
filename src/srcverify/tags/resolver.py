"""Resolve a requested version to a repository tag.

Resolution runs an ordered cascade of candidates and stops at the first hit:
exact tag names first, then regular expressions. Earlier candidates always
win over later ones, and ties inside one candidate go to the first tag in
input order. Nothing is sorted.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from srcverify.diagnostics import DiagnosticSink, NullSink
from srcverify.errors import TagNotFound


@dataclass(frozen=True)
class VersionTag:
    """Resolved tag plus the version it was resolved for."""

    name: str
    requested_version: str
    strategy: str


@dataclass(frozen=True)
class ExactCandidate:
    """Tag name template compared with ``==``."""

    template: str

    @property
    def label(self) -> str:
        return f"exact:{self.template}"

    def find(self, project: str, version: str, tags: Sequence[str]) -> str | None:
        wanted = self.template.format(project=project, version=version)
        for tag in tags:
            if tag == wanted:
                return tag
        return None


@dataclass(frozen=True)
class RegexCandidate:
    """Regular expression template; ``{version}`` is escaped, ``{project}`` is not."""

    template: str

    @property
    def label(self) -> str:
        return f"regex:{self.template}"

    def compile(self, project: str, version: str) -> re.Pattern[str]:
        expression = self.template.replace("{project}", project).replace("{version}", re.escape(version))
        return re.compile(expression)

    def find(self, project: str, version: str, tags: Sequence[str]) -> str | None:
        try:
            pattern = self.compile(project, version)
        except re.error:
            return None
        for tag in tags:
            if pattern.search(tag):
                return tag
        return None


DEFAULT_EXACT_CANDIDATES: tuple[ExactCandidate, ...] = (
    ExactCandidate("{version}"),
    ExactCandidate("v{version}"),
    ExactCandidate("{project}-{version}"),
    ExactCandidate("{project}_{version}"),
    ExactCandidate("{project}/{version}"),
    ExactCandidate("release-{version}"),
    ExactCandidate("{version}-release"),
)

DEFAULT_REGEX_CANDIDATES: tuple[RegexCandidate, ...] = (
    RegexCandidate(r"^v?{version}$"),
    RegexCandidate(r"^{project}[-_]?v?{version}$"),
    RegexCandidate(r"^v?{version}[-_].*$"),
    RegexCandidate(r".*[-_]v?{version}$"),
    RegexCandidate(r"^v?{version}[^0-9]"),
)


class TagResolver:
    """Ordered heuristic cascade over exact and regex tag candidates."""

    def __init__(
        self,
        exact_candidates: Sequence[ExactCandidate] = DEFAULT_EXACT_CANDIDATES,
        regex_candidates: Sequence[RegexCandidate] = DEFAULT_REGEX_CANDIDATES,
        *,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.candidates: tuple[ExactCandidate | RegexCandidate, ...] = (
            *exact_candidates,
            *regex_candidates,
        )
        self.sink = sink or NullSink()

    def resolve(self, project: str, requested_version: str, available_tags: Sequence[str]) -> VersionTag:
        tags = list(available_tags)
        self.sink.debug(f"looking for version {requested_version} of {project} in {len(tags)} tag(s)")
        for candidate in self.candidates:
            hit = candidate.find(project, requested_version, tags)
            if hit is not None:
                self.sink.debug(f"resolved {requested_version} to tag {hit} ({candidate.label})")
                return VersionTag(name=hit, requested_version=requested_version, strategy=candidate.label)
        raise TagNotFound(project, requested_version, tags)


def resolve_tag(
    project: str,
    requested_version: str,
    available_tags: Sequence[str],
    *,
    sink: DiagnosticSink | None = None,
) -> VersionTag:
    """Resolve with the default candidate cascade."""
    return TagResolver(sink=sink).resolve(project, requested_version, available_tags)
