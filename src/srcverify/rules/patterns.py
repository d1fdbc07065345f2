"""Compile glob-like ignore patterns into rule sets."""

from __future__ import annotations

import re
from collections.abc import Iterable

from srcverify.rules.types import IgnoreRule, RuleKind, RuleSet, normalize_path

ARTIFACT_NAMESPACE = "artifact"
SOURCE_NAMESPACE = "source"

# Published artifacts rarely carry anything beyond VCS metadata.
DEFAULT_ARTIFACT_IGNORE_PATTERNS: tuple[str, ...] = (".git/",)

# Files and directories a repository carries that are conventionally left
# out of a published gem.
DEFAULT_SOURCE_IGNORE_PATTERNS: tuple[str, ...] = (
    # Version control
    ".git/",
    ".gitignore",
    ".gitattributes",
    ".gitmodules",
    # CI
    ".github/",
    ".circleci/",
    # Build tooling
    "Gemfile",
    "Gemfile.lock",
    "Rakefile",
    "Guardfile",
    ".rspec",
    "CHANGELOG.rst",
    # Development-only gemspec variants
    "*-java.gemspec",
    "*_pure.gemspec",
    "*-dev.gemspec",
    "dev-*.gemspec",
    # Development directories
    "bin/",
    "script/",
    "scripts/",
    "exe/",
    "test/",
    "tests/",
    "spec/",
    "specs/",
    "features/",
    "benchmark/",
    "benchmarks/",
    "example/",
    "examples/",
    "sample/",
    "samples/",
    "demo/",
    "demos/",
    "doc/",
    "docs/",
    # Build output and logs
    "pkg/",
    "vendor/",
    "coverage/",
    "tmp/",
    "log/",
    "logs/",
    # IDE and OS files
    ".vscode/",
    ".idea/",
    "*.swp",
    "*.swo",
    ".DS_Store",
    "Thumbs.db",
    # Language tooling
    "node_modules/",
    ".bundle/",
    ".yardoc/",
    # Environment and container config
    ".env",
    ".env.*",
    "Dockerfile",
    ".dockerignore",
    "Vagrantfile",
    # Misc development files
    ".simplecov",
    ".yardopts",
    ".yard/**/*",
    "gemfiles/",
    "gemfiles/**/*",
    # Documentation extensions
    "*.md",
    "*.txt",
    "*.yml",
    "*.yaml",
    # License files
    "*license*",
    "*licence*",
)

_STAR_RUN = re.compile(r"\*+")


def compile_pattern(pattern: str) -> IgnoreRule:
    """Compile one pattern into an anchored, case-insensitive rule.

    A trailing ``/`` makes a directory prefix, any ``*`` makes a wildcard
    (``*`` also crosses ``/``), anything else is an exact path.
    """
    normalized = normalize_path(pattern.strip())
    if normalized.endswith("/"):
        prefix = normalized.rstrip("/")
        regex = rf"{re.escape(prefix)}(?:/|\Z)"
        kind = RuleKind.DIRECTORY_PREFIX
    elif "*" in normalized:
        literals = _STAR_RUN.split(normalized)
        regex = ".*".join(re.escape(part) for part in literals) + r"\Z"
        kind = RuleKind.WILDCARD
    else:
        regex = rf"{re.escape(normalized)}\Z"
        kind = RuleKind.EXACT
    return IgnoreRule(
        kind=kind,
        pattern=pattern,
        regex=re.compile(regex, re.IGNORECASE | re.DOTALL),
    )


def compile_rules(
    default_patterns: Iterable[str],
    extra_patterns: Iterable[str] | None = None,
    *,
    namespace: str,
) -> RuleSet:
    """Build a rule set from defaults followed by caller additions."""
    patterns = list(default_patterns)
    if extra_patterns:
        patterns.extend(extra_patterns)
    rules = tuple(compile_pattern(p) for p in patterns if p.strip())
    return RuleSet(namespace=namespace, rules=rules)


def matches(rule_set: RuleSet, path: str) -> bool:
    """Return True when any rule in ``rule_set`` matches ``path``."""
    return rule_set.matches(path)


def artifact_rules(extra_patterns: Iterable[str] | None = None) -> RuleSet:
    return compile_rules(DEFAULT_ARTIFACT_IGNORE_PATTERNS, extra_patterns, namespace=ARTIFACT_NAMESPACE)


def source_rules(extra_patterns: Iterable[str] | None = None) -> RuleSet:
    return compile_rules(DEFAULT_SOURCE_IGNORE_PATTERNS, extra_patterns, namespace=SOURCE_NAMESPACE)
