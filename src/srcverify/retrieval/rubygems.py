"""RubyGems.org client: gem download, unpacking and repository discovery."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import requests

from srcverify.diagnostics import DiagnosticSink, NullSink
from srcverify.errors import RepositoryNotFound, RetrievalFailed
from srcverify.retrieval.archives import extract_tar
from srcverify.retrieval.base import DEFAULT_HTTP_TIMEOUT, USER_AGENT, RepositoryRef

RUBYGEMS_BASE_URL = "https://rubygems.org"

TOP_LEVEL_URL_KEYS: tuple[str, ...] = ("source_code_uri", "homepage_uri", "project_uri")
METADATA_URL_KEYS: tuple[str, ...] = (
    "source_code_uri",
    "homepage_uri",
    "project_uri",
    "bug_tracker_uri",
    "changelog_uri",
    "documentation_uri",
)

_GITHUB_URL = re.compile(r"github\.com[/:]([^/\s]+)/([^/\s]+)")
_TREE_SUBDIR = re.compile(r"/tree/[^/]+/(.+)$")
_REPO_SUFFIX = re.compile(r"/(tree|blob|releases|issues).*$")


def find_repository_url(gem_info: dict[str, Any]) -> str | None:
    """Return the first github.com URL advertised in gem metadata."""
    candidates: list[Any] = [gem_info.get(key) for key in TOP_LEVEL_URL_KEYS]
    metadata = gem_info.get("metadata")
    if isinstance(metadata, dict):
        candidates.extend(metadata.get(key) for key in METADATA_URL_KEYS)
    for url in candidates:
        if isinstance(url, str) and "github.com" in url:
            return url
    return None


def parse_github_url(url: str) -> RepositoryRef:
    """Extract owner, repository and optional monorepo subdirectory from a URL."""
    match = _GITHUB_URL.search(url)
    if not match:
        raise RepositoryNotFound(f"Could not extract repository information from GitHub URL: {url}")
    owner, repo = match.group(1), match.group(2)

    subdirectory = None
    sub_match = _TREE_SUBDIR.search(url)
    if sub_match:
        subdirectory = re.split(r"[#?]", sub_match.group(1))[0].strip("/") or None

    repo = re.split(r"[#?]", repo)[0]
    repo = _REPO_SUFFIX.sub("", repo)
    repo = re.sub(r"\.git$", "", repo)
    return RepositoryRef(owner=owner, name=repo, subdirectory=subdirectory)


class RubyGemsClient:
    """Download gems and read their metadata from a RubyGems-compatible host."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = RUBYGEMS_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.sink = sink or NullSink()

    def gem_info(self, package: str) -> dict[str, Any]:
        """Fetch gem metadata.

        A 404 means the gem is unknown and raises ``RepositoryNotFound``.
        Transport failures, other HTTP errors and malformed bodies raise
        ``RetrievalFailed``.
        """
        url = f"{self.base_url}/api/v1/gems/{package}.json"
        self.sink.debug(f"fetching gem info from {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            if response.status_code == 404:
                raise RepositoryNotFound(f"Gem '{package}' was not found on RubyGems")
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise RetrievalFailed(
                f"Failed to fetch gem information from RubyGems API for '{package}': {exc}"
            ) from exc
        except ValueError as exc:
            raise RetrievalFailed(f"RubyGems API returned invalid JSON for '{package}'") from exc
        if not isinstance(payload, dict):
            raise RetrievalFailed(f"RubyGems API returned unexpected payload for '{package}'")
        return payload

    def locate(self, package: str) -> RepositoryRef:
        url = find_repository_url(self.gem_info(package))
        if url is None:
            raise RepositoryNotFound(
                f"Could not discover GitHub repository for gem '{package}'. Provide --repo owner/name."
            )
        ref = parse_github_url(url)
        self.sink.debug(f"discovered repository {ref} for {package}")
        return ref

    def fetch_artifact(self, package: str, version: str, dest: Path) -> Path:
        """Download ``<package>-<version>.gem`` and unpack its data payload."""
        gem_path = dest / f"{package}-{version}.gem"
        url = f"{self.base_url}/downloads/{package}-{version}.gem"
        self.sink.debug(f"downloading {url}")
        try:
            dest.mkdir(parents=True, exist_ok=True)
            with self.session.get(url, timeout=self.timeout, stream=True, allow_redirects=True) as response:
                response.raise_for_status()
                with open(gem_path, "wb") as handle:
                    for chunk in response.iter_content(chunk_size=65536):
                        handle.write(chunk)
        except (requests.RequestException, OSError) as exc:
            raise RetrievalFailed(f"Failed to download gem {package} version {version}: {exc}") from exc

        outer = extract_tar(gem_path, dest / "gem_contents")
        data_tar = outer / "data.tar.gz"
        if not data_tar.is_file():
            raise RetrievalFailed(f"Could not find data.tar.gz in {gem_path.name}")
        return extract_tar(data_tar, dest / "gem_files")
