"""GitHub collaborator: tag listing and tagged source archive download."""

from __future__ import annotations

import tempfile
from pathlib import Path
from urllib.parse import quote

import requests

from srcverify.diagnostics import DiagnosticSink, NullSink
from srcverify.errors import RetrievalFailed
from srcverify.retrieval.archives import extract_zip_stripped
from srcverify.retrieval.base import DEFAULT_HTTP_TIMEOUT, USER_AGENT, RepositoryRef

GITHUB_API_URL = "https://api.github.com"
GITHUB_WEB_URL = "https://github.com"
TAGS_PER_PAGE = 100
MAX_TAG_PAGES = 50


class GitHubClient:
    """List tags and download tag archives for a GitHub repository."""

    def __init__(
        self,
        *,
        token: str | None = None,
        session: requests.Session | None = None,
        api_url: str = GITHUB_API_URL,
        web_url: str = GITHUB_WEB_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.session.headers.setdefault("Accept", "application/vnd.github+json")
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        self.api_url = api_url.rstrip("/")
        self.web_url = web_url.rstrip("/")
        self.timeout = timeout
        self.sink = sink or NullSink()

    def list_tags(self, repository: RepositoryRef) -> list[str]:
        """Return tag names in the order the API lists them, across all pages."""
        names: list[str] = []
        for page in range(1, MAX_TAG_PAGES + 1):
            url = f"{self.api_url}/repos/{repository.slug}/tags"
            try:
                response = self.session.get(
                    url,
                    params={"per_page": TAGS_PER_PAGE, "page": page},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                payload = response.json()
            except requests.RequestException as exc:
                raise RetrievalFailed(
                    f"Failed to fetch tags from GitHub repository '{repository.slug}': {exc}"
                ) from exc
            except ValueError as exc:
                raise RetrievalFailed(f"GitHub returned invalid JSON for tags of '{repository.slug}'") from exc

            if not isinstance(payload, list):
                raise RetrievalFailed(f"GitHub returned unexpected tag payload for '{repository.slug}'")
            names.extend(str(item["name"]) for item in payload if isinstance(item, dict) and "name" in item)
            if len(payload) < TAGS_PER_PAGE:
                break
        self.sink.debug(f"listed {len(names)} tag(s) for {repository.slug}")
        return names

    def archive_url(self, repository: RepositoryRef, tag: str) -> str:
        return f"{self.web_url}/{repository.slug}/archive/refs/tags/{quote(tag, safe='/')}.zip"

    def fetch_source(self, repository: RepositoryRef, tag: str, dest: Path) -> Path:
        """Download the tag archive and unpack it, honoring a monorepo subdirectory."""
        url = self.archive_url(repository, tag)
        self.sink.debug(f"downloading source archive {url}")
        with tempfile.TemporaryDirectory(prefix="srcverify-archive-") as tmp:
            archive_path = Path(tmp) / "source.zip"
            try:
                with self.session.get(url, timeout=self.timeout, stream=True, allow_redirects=True) as response:
                    response.raise_for_status()
                    with open(archive_path, "wb") as handle:
                        for chunk in response.iter_content(chunk_size=65536):
                            handle.write(chunk)
            except (requests.RequestException, OSError) as exc:
                raise RetrievalFailed(f"Failed to download source archive from GitHub: {exc}") from exc
            return extract_zip_stripped(archive_path, dest, subdirectory=repository.subdirectory)
