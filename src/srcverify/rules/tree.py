"""Enumerate the comparable file set of a directory tree."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from srcverify.diagnostics import DiagnosticSink, NullSink
from srcverify.errors import ComparisonIOError
from srcverify.rules.types import RuleSet, normalize_path

VCS_DIR_NAME = ".git"


def enumerate_files(root: Path, *, sink: DiagnosticSink | None = None) -> list[str]:
    """List regular files under ``root`` as sorted relative POSIX paths.

    Hidden files are included. Anything below a ``.git`` segment is skipped,
    and a missing root yields an empty list.
    """
    sink = sink or NullSink()
    root = Path(root)
    if not root.is_dir():
        sink.debug(f"tree {root} does not exist; treating as empty")
        return []

    def _on_error(exc: OSError) -> None:
        rel = _relative(Path(exc.filename or root), root)
        sink.warning(str(ComparisonIOError(rel, f"cannot list directory: {exc.strerror or exc}")))

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(d for d in dirnames if d != VCS_DIR_NAME)
        base = Path(dirpath)
        for name in filenames:
            if name == VCS_DIR_NAME:
                # .git file pointing at a worktree/submodule gitdir
                continue
            path = base / name
            if not path.is_file():
                continue
            found.append(_relative(path, root))
    found.sort()
    return found


def filter_paths(paths: Iterable[str], rule_set: RuleSet) -> list[str]:
    """Drop paths matched by ``rule_set``; input order is kept."""
    return [normalize_path(p) for p in paths if not rule_set.matches(p)]


def comparable_files(
    root: Path,
    rule_set: RuleSet,
    *,
    sink: DiagnosticSink | None = None,
) -> list[str]:
    """Enumerate ``root`` and filter it through ``rule_set``."""
    sink = sink or NullSink()
    listed = enumerate_files(root, sink=sink)
    kept = filter_paths(listed, rule_set)
    sink.debug(
        f"{rule_set.namespace}: {len(kept)} comparable file(s), "
        f"{len(listed) - len(kept)} ignored under {root}"
    )
    return kept


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
