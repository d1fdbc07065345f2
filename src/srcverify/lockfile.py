"""Read locked gem versions from a Bundler ``Gemfile.lock``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from srcverify.errors import VerifyError

SKIPPED_GEMS = frozenset({"bundler"})

_SPEC_LINE = re.compile(r"^    (\S+) \(([^)]+)\)\s*$")


@dataclass(frozen=True)
class LockedGem:
    name: str
    version: str


def parse_lockfile(text: str) -> list[LockedGem]:
    """Return the gems of every ``GEM`` section's ``specs:`` block, sorted by name.

    Dependency lines (deeper indentation) and gems from ``GIT``/``PATH``
    sections are ignored since they have no published artifact to compare.
    """
    gems: dict[str, LockedGem] = {}
    section = None
    in_specs = False
    for line in text.splitlines():
        if line and not line.startswith(" "):
            section = line.strip()
            in_specs = False
            continue
        if section != "GEM":
            continue
        if line.strip() == "specs:":
            in_specs = True
            continue
        if not in_specs:
            continue
        match = _SPEC_LINE.match(line)
        if match and match.group(1) not in SKIPPED_GEMS:
            gems[match.group(1)] = LockedGem(name=match.group(1), version=match.group(2))
    return sorted(gems.values(), key=lambda gem: gem.name)


def load_lockfile(path: Path) -> list[LockedGem]:
    if not path.is_file():
        raise VerifyError(f"Lockfile not found: {path}")
    return parse_lockfile(path.read_text(encoding="utf-8"))
