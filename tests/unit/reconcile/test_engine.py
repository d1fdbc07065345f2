"""Unit tests for tree reconciliation."""

from __future__ import annotations

from pathlib import Path

import pytest

from srcverify.diagnostics import RecordingSink
from srcverify.errors import DiffToolError
from srcverify.reconcile import IDENTICAL_SUMMARY, compare_trees
from srcverify.rules import artifact_rules, compile_rules, source_rules


class _FailingDiffer:
    name = "broken"

    def diff(self, path: str, artifact: bytes, source: bytes) -> str:
        raise DiffToolError(f"cannot diff {path}")


def _no_rules(namespace: str):
    return compile_rules([], namespace=namespace)


def test_identical_trees(make_tree) -> None:
    files = {"lib/a.rb": "puts 1\n", "foo.gemspec": "spec"}
    result = compare_trees(
        make_tree("artifact", files),
        make_tree("source", files),
        _no_rules("artifact"),
        _no_rules("source"),
    )
    assert result.identical
    assert result.summary == IDENTICAL_SUMMARY
    assert result.diff == ""
    assert result.artifact_only == result.source_only == result.modified == ()
    assert result.total_differences == 0


def test_injected_file_and_ignored_spec(make_tree) -> None:
    artifact = make_tree("artifact", {"lib/a.rb": "x\n", "lib/backdoor.rb": "evil\n"})
    source = make_tree("source", {"lib/a.rb": "x\n", "spec/a_spec.rb": "it\n"})
    result = compare_trees(artifact, source, artifact_rules(), source_rules())
    assert not result.identical
    assert result.artifact_only == ("lib/backdoor.rb",)
    assert result.source_only == ()
    assert result.modified == ()
    assert result.summary == "1 file(s) only in artifact"


def test_modified_file_produces_diff_block(make_tree) -> None:
    artifact = make_tree("artifact", {"lib/a.rb": "one\ntwo\n"})
    source = make_tree("source", {"lib/a.rb": "one\nTWO\n"})
    result = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"))
    assert result.modified == ("lib/a.rb",)
    assert result.summary == "1 file(s) modified"
    assert result.diff.startswith("diff a/lib/a.rb b/lib/a.rb\n")
    assert "--- a/lib/a.rb" in result.diff
    assert "-two\n" in result.diff
    assert "+TWO\n" in result.diff


def test_summary_lists_every_category_in_order(make_tree) -> None:
    artifact = make_tree("artifact", {"x.rb": "1", "y.rb": "1", "only_a.rb": "a"})
    source = make_tree("source", {"x.rb": "2", "y.rb": "1", "only_s1.rb": "s", "only_s2.rb": "s"})
    result = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"))
    assert result.summary == (
        "1 file(s) only in artifact\n2 file(s) only in source\n1 file(s) modified"
    )
    assert result.total_differences == 4


def test_excluded_path_never_surfaces(make_tree) -> None:
    artifact = make_tree("artifact", {"README.md": "gem readme", "lib/a.rb": "a"})
    source = make_tree("source", {"README.md": "repo readme", "lib/a.rb": "a"})
    result = compare_trees(artifact, source, artifact_rules(["*.md"]), source_rules())
    assert result.identical
    assert "README.md" not in result.diff


def test_source_side_exclusion_still_reports_artifact_copy(make_tree) -> None:
    artifact = make_tree("artifact", {"README.md": "readme", "lib/a.rb": "a"})
    source = make_tree("source", {"README.md": "readme", "lib/a.rb": "a"})
    result = compare_trees(artifact, source, artifact_rules(), source_rules())
    assert result.artifact_only == ("README.md",)


def test_categories_are_sorted_and_disjoint(make_tree) -> None:
    artifact = make_tree("artifact", {"z.rb": "1", "a.rb": "1", "m.rb": "old"})
    source = make_tree("source", {"m.rb": "new", "b.rb": "1"})
    result = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"))
    assert result.artifact_only == ("a.rb", "z.rb")
    assert result.source_only == ("b.rb",)
    assert result.modified == ("m.rb",)
    assert not set(result.artifact_only) & set(result.source_only)


def test_missing_source_tree_makes_everything_artifact_only(make_tree, tmp_path: Path) -> None:
    artifact = make_tree("artifact", {"lib/a.rb": "a", "lib/b.rb": "b"})
    result = compare_trees(artifact, tmp_path / "nope", _no_rules("artifact"), _no_rules("source"))
    assert result.artifact_only == ("lib/a.rb", "lib/b.rb")
    assert result.source_only == ()


def test_git_metadata_is_never_compared(make_tree) -> None:
    artifact = make_tree("artifact", {"lib/a.rb": "a"})
    source = make_tree("source", {"lib/a.rb": "a", ".git/HEAD": "ref: refs/heads/main"})
    result = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"))
    assert result.identical


def test_differ_failure_is_recorded_as_modified(make_tree) -> None:
    artifact = make_tree("artifact", {"lib/a.rb": "a"})
    source = make_tree("source", {"lib/a.rb": "b"})
    sink = RecordingSink()
    result = compare_trees(
        artifact,
        source,
        _no_rules("artifact"),
        _no_rules("source"),
        differ=_FailingDiffer(),
        sink=sink,
    )
    assert result.modified == ("lib/a.rb",)
    assert "Comparison failed for lib/a.rb" in result.diff
    assert len(result.path_errors) == 1
    error = result.path_errors[0]
    assert error.path == "lib/a.rb"
    assert error.reason_code == "COMPARISON_IO"
    assert sink.messages("warning")


def test_unreadable_file_is_recorded_as_modified(make_tree, monkeypatch: pytest.MonkeyPatch) -> None:
    artifact = make_tree("artifact", {"lib/a.rb": "a", "lib/b.rb": "b"})
    source = make_tree("source", {"lib/a.rb": "a", "lib/b.rb": "b"})
    original = Path.read_bytes

    def _read_bytes(self: Path) -> bytes:
        if self.name == "b.rb":
            raise PermissionError(13, "Permission denied", str(self))
        return original(self)

    monkeypatch.setattr(Path, "read_bytes", _read_bytes)
    result = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"))
    assert result.modified == ("lib/b.rb",)
    assert "Permission denied" in result.path_errors[0].message


def test_binary_files_are_reported_without_content(make_tree) -> None:
    artifact = make_tree("artifact", {"data.bin": b"\x00\x01\x02"})
    source = make_tree("source", {"data.bin": b"\x00\x01\x03"})
    result = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"))
    assert result.modified == ("data.bin",)
    assert "Binary files a/data.bin and b/data.bin differ" in result.diff


def test_parallel_comparison_matches_sequential(make_tree) -> None:
    artifact_files = {f"lib/f{i:02d}.rb": f"line {i}\n" for i in range(20)}
    source_files = dict(artifact_files)
    for i in range(0, 20, 3):
        source_files[f"lib/f{i:02d}.rb"] = f"changed {i}\n"
    artifact = make_tree("artifact", artifact_files)
    source = make_tree("source", source_files)
    sequential = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"))
    parallel = compare_trees(artifact, source, _no_rules("artifact"), _no_rules("source"), workers=4)
    assert parallel == sequential
    assert len(parallel.modified) == 7


def test_modified_file_next_to_ignored_spec(make_tree) -> None:
    artifact = make_tree("artifact", {"a.rb": "x"})
    source = make_tree("source", {"a.rb": "y", "spec/a_spec.rb": "z"})
    result = compare_trees(artifact, source, artifact_rules(), source_rules())
    assert result.modified == ("a.rb",)
    assert result.source_only == ()
    assert result.artifact_only == ()
    assert not result.identical
