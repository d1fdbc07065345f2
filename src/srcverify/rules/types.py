"""Ignore rule types."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class RuleKind(str, Enum):
    """How an ignore pattern is interpreted."""

    DIRECTORY_PREFIX = "directory_prefix"
    WILDCARD = "wildcard"
    EXACT = "exact"


@dataclass(frozen=True)
class IgnoreRule:
    """A single compiled, case-insensitive ignore rule."""

    kind: RuleKind
    pattern: str
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        return self.regex.match(path) is not None


@dataclass(frozen=True)
class RuleSet:
    """Union of ignore rules for one namespace (``artifact`` or ``source``)."""

    namespace: str
    rules: tuple[IgnoreRule, ...]

    def matches(self, path: str) -> bool:
        normalized = normalize_path(path)
        return any(rule.matches(normalized) for rule in self.rules)

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(rule.pattern for rule in self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def normalize_path(path: str) -> str:
    """Normalize separators to POSIX form."""
    return path.replace("\\", "/")
