"""Unit tests for version tag resolution."""

from __future__ import annotations

import pytest

from srcverify.diagnostics import RecordingSink
from srcverify.errors import TagNotFound
from srcverify.tags import ExactCandidate, TagResolver, resolve_tag


def test_exact_version_beats_project_prefix() -> None:
    tag = resolve_tag("mygem", "1.0.0", ["mygem-1.0.0", "1.0.0"])
    assert tag.name == "1.0.0"
    assert tag.strategy == "exact:{version}"
    assert tag.requested_version == "1.0.0"


def test_v_prefix_exact_candidate_beats_release_suffix() -> None:
    tag = resolve_tag("mygem", "2.3.1", ["v2.3.1", "2.3.1-release"])
    assert tag.name == "v2.3.1"
    assert tag.strategy == "exact:v{version}"


def test_release_suffix_order_follows_candidates_not_tags() -> None:
    tag = resolve_tag("mygem", "2.3.1", ["2.3.1-release", "release-2.3.1"])
    assert tag.name == "release-2.3.1"


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        (["mygem-1.2.0"], "mygem-1.2.0"),
        (["mygem_1.2.0"], "mygem_1.2.0"),
        (["mygem/1.2.0"], "mygem/1.2.0"),
        (["1.2.0-release"], "1.2.0-release"),
    ],
)
def test_exact_candidates(tags: list[str], expected: str) -> None:
    assert resolve_tag("mygem", "1.2.0", tags).name == expected


def test_regex_project_v_prefix() -> None:
    tag = resolve_tag("mygem", "1.2.0", ["other", "mygem-v1.2.0"])
    assert tag.name == "mygem-v1.2.0"
    assert tag.strategy == "regex:^{project}[-_]?v?{version}$"


def test_regex_version_with_suffix() -> None:
    tag = resolve_tag("mygem", "1.2.0", ["1.2.0_final", "1.2.0-rc1"])
    assert tag.name == "1.2.0_final"
    assert tag.strategy == "regex:^v?{version}[-_].*$"


def test_regex_anything_then_version() -> None:
    tag = resolve_tag("mygem", "1.2.0", ["rails-v1.2.0"])
    assert tag.name == "rails-v1.2.0"
    assert tag.strategy == "regex:.*[-_]v?{version}$"


def test_regex_version_followed_by_non_digit() -> None:
    tag = resolve_tag("mygem", "1.2.0", ["1.2.00", "v1.2.0.beta"])
    assert tag.name == "v1.2.0.beta"
    assert tag.strategy == "regex:^v?{version}[^0-9]"


def test_version_metacharacters_are_literal() -> None:
    with pytest.raises(TagNotFound):
        resolve_tag("mygem", "1.2.0", ["1x2y0"])
    with pytest.raises(TagNotFound):
        resolve_tag("mygem", "1.*", ["1.2.3", "v1.9"])


def test_ties_go_to_first_tag_in_input_order() -> None:
    tags = ["1.2.0-b", "1.2.0-a"]
    assert resolve_tag("mygem", "1.2.0", tags).name == "1.2.0-b"
    assert resolve_tag("mygem", "1.2.0", list(reversed(tags))).name == "1.2.0-a"


def test_resolution_is_deterministic() -> None:
    tags = ["x-1.0", "1.0-beta", "v1.0.1", "mygem_v1.0"]
    first = resolve_tag("mygem", "1.0", tags)
    for _ in range(5):
        assert resolve_tag("mygem", "1.0", tags) == first


def test_invalid_project_regex_does_not_crash() -> None:
    tag = resolve_tag("c++", "1.0", ["c++-1.0", "release_1.0"])
    assert tag.name == "c++-1.0"
    assert tag.strategy == "exact:{project}-{version}"
    assert resolve_tag("broken(", "2.0", ["lib-2.0"]).name == "lib-2.0"


def test_tag_not_found_caps_sample() -> None:
    tags = [f"t{i}" for i in range(25)]
    with pytest.raises(TagNotFound) as excinfo:
        resolve_tag("mygem", "9.9.9", tags)
    err = excinfo.value
    assert err.sample_tags == tuple(tags[:20])
    assert err.total_tags == 25
    assert err.reason_code == "TAG_NOT_FOUND"
    assert "9.9.9" in str(err)
    assert str(err).endswith("...")


def test_custom_candidates_and_sink() -> None:
    sink = RecordingSink()
    resolver = TagResolver([ExactCandidate("rel/{version}")], [], sink=sink)
    assert resolver.resolve("p", "3.0", ["3.0", "rel/3.0"]).name == "rel/3.0"
    assert any("rel/3.0" in msg for msg in sink.messages("debug"))
