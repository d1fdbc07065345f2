"""Archive unpacking with path containment checks."""

from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path, PurePosixPath

from srcverify.errors import RetrievalFailed


def _safe_target(dest: Path, relative: str) -> Path:
    target = (dest / relative).resolve()
    root = dest.resolve()
    if target != root and root not in target.parents:
        raise RetrievalFailed(f"Archive member escapes destination: {relative}")
    return target


def extract_tar(archive: Path, dest: Path) -> Path:
    """Extract a (possibly gzipped) tar archive into ``dest``."""
    dest.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive, "r:*") as tar:
            members = []
            for member in tar.getmembers():
                if not (member.isfile() or member.isdir()):
                    continue
                _safe_target(dest, member.name)
                members.append(member)
            tar.extractall(dest, members=members, filter="data")
    except (tarfile.TarError, OSError) as exc:
        raise RetrievalFailed(f"Failed to extract {archive.name}: {exc}") from exc
    return dest


def extract_zip_stripped(
    archive: Path,
    dest: Path,
    *,
    subdirectory: str | None = None,
) -> Path:
    """Extract a zip, dropping its single top-level directory when present.

    With ``subdirectory`` only members below that directory are kept, and the
    subdirectory prefix is removed as well.
    """
    dest.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
            tops = {PurePosixPath(name).parts[0] for name in names if name.strip("/")}
            strip = None
            if len(tops) == 1:
                top = tops.pop()
                if all(name.startswith(f"{top}/") for name in names):
                    strip = top
            prefix = subdirectory.strip("/") if subdirectory else None

            for info in zf.infolist():
                parts = PurePosixPath(info.filename).parts
                if strip is not None:
                    parts = parts[1:]
                if prefix is not None:
                    prefix_parts = PurePosixPath(prefix).parts
                    if parts[: len(prefix_parts)] != prefix_parts:
                        continue
                    parts = parts[len(prefix_parts):]
                if not parts:
                    continue
                relative = PurePosixPath(*parts).as_posix()
                target = _safe_target(dest, relative)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as out:
                    while True:
                        chunk = src.read(65536)
                        if not chunk:
                            break
                        out.write(chunk)
    except (zipfile.BadZipFile, OSError) as exc:
        raise RetrievalFailed(f"Failed to extract {archive.name}: {exc}") from exc
    return dest
