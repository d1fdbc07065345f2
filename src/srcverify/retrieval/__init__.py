"""Retrieval collaborators: artifact download, tag listing, source archives."""

from srcverify.retrieval.base import (
    ArtifactSource,
    RepositoryLocator,
    RepositoryRef,
    SourceArchive,
    TagSource,
)
from srcverify.retrieval.github import GitHubClient
from srcverify.retrieval.rubygems import RubyGemsClient, find_repository_url, parse_github_url

__all__ = [
    "ArtifactSource",
    "GitHubClient",
    "RepositoryLocator",
    "RepositoryRef",
    "RubyGemsClient",
    "SourceArchive",
    "TagSource",
    "find_repository_url",
    "parse_github_url",
]
