"""Error taxonomy for srcverify.

Every error carries a stable ``reason_code`` so batch tooling can tell
"could not verify" apart from "verified and found differences" without
parsing messages.
"""

from __future__ import annotations

from collections.abc import Sequence

TAG_SAMPLE_LIMIT = 20

REASON_TAG_NOT_FOUND = "TAG_NOT_FOUND"
REASON_REPOSITORY_NOT_FOUND = "REPOSITORY_NOT_FOUND"
REASON_RETRIEVAL_FAILED = "RETRIEVAL_FAILED"
REASON_COMPARISON_IO = "COMPARISON_IO"
REASON_DIFF_TOOL = "DIFF_TOOL"
REASON_CONFIG_INVALID = "CONFIG_INVALID"


class VerifyError(RuntimeError):
    """Base class for all srcverify failures."""

    reason_code: str = "VERIFY_ERROR"

    def __init__(self, message: str, reason_code: str | None = None) -> None:
        super().__init__(message)
        if reason_code is not None:
            self.reason_code = reason_code


class TagNotFound(VerifyError):
    """No tag matched the requested version under any heuristic."""

    reason_code = REASON_TAG_NOT_FOUND

    def __init__(self, project: str, version: str, available_tags: Sequence[str]) -> None:
        self.project = project
        self.version = version
        self.sample_tags: tuple[str, ...] = tuple(available_tags[:TAG_SAMPLE_LIMIT])
        self.total_tags = len(available_tags)
        rendered = ", ".join(self.sample_tags) or "(none)"
        if self.total_tags > TAG_SAMPLE_LIMIT:
            rendered += "..."
        super().__init__(
            f"Could not find matching tag for version '{version}' of '{project}'. "
            f"Available tags: {rendered}"
        )


class RepositoryNotFound(VerifyError):
    """The source repository of a package could not be discovered."""

    reason_code = REASON_REPOSITORY_NOT_FOUND


class RetrievalFailed(VerifyError):
    """Downloading, listing or unpacking an artifact or source archive failed."""

    reason_code = REASON_RETRIEVAL_FAILED


class ComparisonIOError(VerifyError):
    """Reading or diffing a single path failed during comparison."""

    reason_code = REASON_COMPARISON_IO

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class DiffToolError(VerifyError):
    """An external diff backend failed or is unavailable."""

    reason_code = REASON_DIFF_TOOL


class ConfigError(VerifyError, ValueError):
    """Configuration file or option validation error."""

    reason_code = REASON_CONFIG_INVALID
