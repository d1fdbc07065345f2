"""Version tag resolution."""

from srcverify.tags.resolver import (
    DEFAULT_EXACT_CANDIDATES,
    DEFAULT_REGEX_CANDIDATES,
    ExactCandidate,
    RegexCandidate,
    TagResolver,
    VersionTag,
    resolve_tag,
)

__all__ = [
    "DEFAULT_EXACT_CANDIDATES",
    "DEFAULT_REGEX_CANDIDATES",
    "ExactCandidate",
    "RegexCandidate",
    "TagResolver",
    "VersionTag",
    "resolve_tag",
]
