"""HTTP fakes for retrieval tests."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Any

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, content: bytes = b"") -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = content

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def iter_content(self, chunk_size: int = 1024):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start : start + chunk_size]


class FakeSession:
    """Route ``get`` calls by URL (and optional ``page`` param)."""

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.routes: dict[tuple[str, int | None], FakeResponse | Exception] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def add(
        self,
        url: str,
        *,
        payload: Any = None,
        content: bytes = b"",
        status: int = 200,
        error: Exception | None = None,
        page: int | None = None,
    ) -> None:
        self.routes[(url, page)] = error or FakeResponse(status, payload, content)

    def get(self, url: str, params: dict[str, Any] | None = None, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, dict(params or {})))
        page = (params or {}).get("page")
        response = self.routes.get((url, page)) or self.routes.get((url, None))
        if response is None:
            return FakeResponse(status_code=404)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


def tar_bytes(files: dict[str, bytes], *, gzip: bool = False) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz" if gzip else "w") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def zip_bytes(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def gem_bytes(files: dict[str, bytes]) -> bytes:
    """Build a ``.gem``: an outer tar holding ``data.tar.gz`` and metadata."""
    return tar_bytes(
        {
            "metadata.gz": b"",
            "data.tar.gz": tar_bytes(files, gzip=True),
        }
    )


class ArchiveFactory:
    """Write archives under a base directory."""

    def __init__(self, base: Path) -> None:
        self.base = base

    def tar(self, name: str, files: dict[str, bytes], *, gzip: bool = False) -> Path:
        return self._write(name, tar_bytes(files, gzip=gzip))

    def zip(self, name: str, files: dict[str, bytes]) -> Path:
        return self._write(name, zip_bytes(files))

    def _write(self, name: str, data: bytes) -> Path:
        path = self.base / name
        path.write_bytes(data)
        return path

    gem_bytes = staticmethod(gem_bytes)
    tar_bytes = staticmethod(tar_bytes)
    zip_bytes = staticmethod(zip_bytes)


@pytest.fixture
def archives(tmp_path: Path) -> ArchiveFactory:
    return ArchiveFactory(tmp_path)
