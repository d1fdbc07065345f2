"""Ignore rules and comparable-file enumeration."""

from srcverify.rules.patterns import (
    ARTIFACT_NAMESPACE,
    DEFAULT_ARTIFACT_IGNORE_PATTERNS,
    DEFAULT_SOURCE_IGNORE_PATTERNS,
    SOURCE_NAMESPACE,
    artifact_rules,
    compile_pattern,
    compile_rules,
    matches,
    source_rules,
)
from srcverify.rules.tree import comparable_files, enumerate_files, filter_paths
from srcverify.rules.types import IgnoreRule, RuleKind, RuleSet

__all__ = [
    "ARTIFACT_NAMESPACE",
    "DEFAULT_ARTIFACT_IGNORE_PATTERNS",
    "DEFAULT_SOURCE_IGNORE_PATTERNS",
    "IgnoreRule",
    "RuleKind",
    "RuleSet",
    "SOURCE_NAMESPACE",
    "artifact_rules",
    "comparable_files",
    "compile_pattern",
    "compile_rules",
    "enumerate_files",
    "filter_paths",
    "matches",
    "source_rules",
]
