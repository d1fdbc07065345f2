"""Collaborator interfaces between retrieval and the reconciliation core."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

DEFAULT_HTTP_TIMEOUT = 30.0
USER_AGENT = "srcverify"


@dataclass(frozen=True)
class RepositoryRef:
    """A source repository, optionally narrowed to a monorepo subdirectory."""

    owner: str
    name: str
    subdirectory: str | None = None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        if self.subdirectory:
            return f"{self.slug}:{self.subdirectory}"
        return self.slug


class ArtifactSource(Protocol):
    """Fetch a published artifact into a local, fully populated directory."""

    def fetch_artifact(self, package: str, version: str, dest: Path) -> Path: ...


class TagSource(Protocol):
    """List the tag names of a repository in API order."""

    def list_tags(self, repository: RepositoryRef) -> list[str]: ...


class SourceArchive(Protocol):
    """Fetch the tagged source snapshot into a local directory."""

    def fetch_source(self, repository: RepositoryRef, tag: str, dest: Path) -> Path: ...


class RepositoryLocator(Protocol):
    """Discover the source repository a package claims to come from."""

    def locate(self, package: str) -> RepositoryRef: ...
