"""Text diff backends: ``diff(path, artifact_bytes, source_bytes) -> str``."""

from __future__ import annotations

import difflib
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from srcverify.errors import DiffToolError
from srcverify.exec import ExecError, run_command, tool_available

NO_NEWLINE_MARKER = "\\ No newline at end of file\n"


class TextDiffer(Protocol):
    """Compute a textual diff between two versions of one path."""

    name: str

    def diff(self, path: str, artifact: bytes, source: bytes) -> str: ...


def _split_lines(text: str) -> list[str]:
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _decode(data: bytes) -> str | None:
    if b"\0" in data:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


class UnifiedDiffer:
    """In-process unified diff built on difflib."""

    name = "difflib"

    def __init__(self, context_lines: int = 3) -> None:
        self.context_lines = context_lines

    def diff(self, path: str, artifact: bytes, source: bytes) -> str:
        if artifact == source:
            return ""
        artifact_text = _decode(artifact)
        source_text = _decode(source)
        if artifact_text is None or source_text is None:
            return f"Binary files a/{path} and b/{path} differ\n"

        out: list[str] = []
        for line in difflib.unified_diff(
            _split_lines(artifact_text),
            _split_lines(source_text),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
            n=self.context_lines,
        ):
            if line.endswith("\n"):
                out.append(line)
            else:
                out.append(line + "\n" + NO_NEWLINE_MARKER)
        return "".join(out) or f"Files a/{path} and b/{path} differ\n"


class GitDiffer:
    """Subprocess adapter around ``git diff --no-index``."""

    name = "git"

    def __init__(self, executable: str = "git", timeout: float | None = 60.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def diff(self, path: str, artifact: bytes, source: bytes) -> str:
        if artifact == source:
            return ""
        if not tool_available(self.executable):
            raise DiffToolError(f"{self.executable} executable not found on PATH")

        with tempfile.TemporaryDirectory(prefix="srcverify-diff-") as tmp:
            work = Path(tmp)
            left = work / "a" / path
            right = work / "b" / path
            left.parent.mkdir(parents=True, exist_ok=True)
            right.parent.mkdir(parents=True, exist_ok=True)
            left.write_bytes(artifact)
            right.write_bytes(source)
            try:
                result = run_command(
                    [
                        self.executable,
                        "diff",
                        "--no-index",
                        "--no-color",
                        "--no-prefix",
                        "--",
                        f"a/{path}",
                        f"b/{path}",
                    ],
                    cwd=work,
                    ok_codes=(0, 1),
                    timeout=self.timeout,
                )
            except ExecError as exc:
                raise DiffToolError(str(exc)) from exc
            except (OSError, subprocess.TimeoutExpired) as exc:
                raise DiffToolError(f"{self.executable} diff failed for {path}: {exc}") from exc

        lines = result.stdout.splitlines(keepends=True)
        for index, line in enumerate(lines):
            if line.startswith("--- ") or line.startswith("Binary files"):
                return "".join(lines[index:])
        return result.stdout or f"Files a/{path} and b/{path} differ\n"


def make_differ(backend: str) -> TextDiffer:
    """Return the differ registered under ``backend``."""
    if backend == UnifiedDiffer.name:
        return UnifiedDiffer()
    if backend == GitDiffer.name:
        return GitDiffer()
    raise ValueError(f"Unknown diff backend: {backend}. Expected one of: difflib, git.")
