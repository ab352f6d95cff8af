import pytest
from semantic_version import Version

from mcp_cosmic_reach_versions.versioning import (
    compare_versions,
    none_version_range,
    parse_version,
    parse_version_range,
    sort_versions,
)


def test_missing_components_are_padded():
    assert parse_version("1.17") == Version("1.17.0")
    assert parse_version("1.16-alpha.20.13.inf") == Version("1.16.0-alpha.20.13.inf")
    assert parse_version("v2") == Version("2.0.0")
    assert compare_versions("1.17", "1.17.0") == 0


def test_prerelease_sorts_before_release():
    assert compare_versions("1.17", "1.17-alpha.21.3.a") == 1
    assert compare_versions("1.16.5-rc.1", "1.16.5-alpha.20.51.a") == 1
    assert compare_versions("1.16.5-alpha.20.45.a", "1.16.5-alpha.20.51.a") == -1


def test_build_metadata_is_ignored():
    assert compare_versions("1.9.2-rv+trendy", "1.9.2-rv") == 0


def test_empty_input_raises():
    with pytest.raises(ValueError):
        compare_versions("", "1")
    with pytest.raises(ValueError):
        parse_version(" \t\n ")
    with pytest.raises(ValueError):
        sort_versions(["1", " "])


def test_sort_lowest_first():
    versions = ["1.17", "1.16.5", "1.17-alpha.21.3.a", "1.16.5-rc.1"]
    assert sort_versions(versions) == ["1.16.5-rc.1", "1.16.5", "1.17-alpha.21.3.a", "1.17"]
    assert sort_versions(versions) == sort_versions(list(reversed(versions)))


def test_comparators_are_intersected():
    r = parse_version_range(">1.16.4 <=1.16.5")
    assert r is not None
    assert not r.includes("1.16.4")
    assert r.includes("1.16.5-rc.1")
    assert r.includes("1.16.5")
    assert not r.includes("1.16.6")


@pytest.mark.parametrize("range", ["1.17", "=1.17", "==1.17", "[1.17]"])
def test_exact_match(range: str):
    r = parse_version_range(range)
    assert r is not None
    assert r.includes("1.17.0")
    assert not r.includes("1.17.1")
    assert not r.includes("1.17-alpha.21.3.a")


def test_prereleases_are_ordered_not_filtered():
    r = parse_version_range("<=1.18")
    assert r is not None
    assert r.includes("1.18-alpha.21.44.a")
    assert not r.includes("1.18.1-rc.1")


@pytest.mark.parametrize(
    "range,inside,outside",
    [
        ("[1.16,1.17)", ["1.16", "1.16.5", "1.17-alpha.21.3.a"], ["1.17", "1.15.2"]),
        ("(1.17,1.18]", ["1.17.1", "1.18"], ["1.17", "1.18.1"]),
        ("(,1.16]", ["0.0.0-rd.150000", "1.16"], ["1.16.1"]),
        ("[1.17,)", ["1.17", "2.0"], ["1.16.5"]),
        ("[ 1.16 , 1.17 )", ["1.16.5"], ["1.17"]),
    ],
)
def test_interval_notation(range: str, inside: list[str], outside: list[str]):
    r = parse_version_range(range)
    assert r is not None
    for v in inside:
        assert r.includes(v), v
    for v in outside:
        assert not r.includes(v), v


def test_wildcard_matches_everything():
    r = parse_version_range("*")
    assert r is not None
    assert r.includes("0.0.0-rd.150000")
    assert r.includes("1.20.4")


def test_union_of_alternatives_and_lists():
    r = parse_version_range([">=1.16 <1.17", "1.18 || 1.19"])
    assert r is not None
    assert r.includes("1.16.5")
    assert r.includes("1.18")
    assert r.includes("1.19")
    assert not r.includes("1.17")
    assert str(r) == ">=1.16 <1.17 || 1.18 || 1.19"


@pytest.mark.parametrize(
    "range",
    [
        "",
        "   ",
        "foo",
        ">1.16 <",
        "1.16 ||",
        "(1.17)",
        "[1.16,1.17",
        "[]",
        "1.17.-1",
        "=1.16.5.1",
        "1.16.5.x",
        "[1.16.5.1,)",
    ],
)
def test_unparseable_ranges_return_none(range: str):
    assert parse_version_range(range) is None


def test_empty_list_returns_none():
    assert parse_version_range([]) is None


def test_unparseable_version_is_not_included():
    r = parse_version_range("*")
    assert r is not None
    assert not r.includes("not a version")
    assert not r.includes("")


def test_membership_and_union_operators():
    old = parse_version_range("<1.0.0")
    new = parse_version_range(">=1.20")
    assert old is not None and new is not None

    both = old | new
    assert "1.0.0-beta.8.1" in both
    assert "1.20.4" in both
    assert "1.16.5" not in both


def test_none_range_matches_nothing():
    nothing = none_version_range("20w14~ || ???")
    assert str(nothing) == "20w14~ || ???"
    assert not nothing.includes("1.16.5")

    r = parse_version_range("1.16.5")
    assert r is not None
    assert (nothing | r) is r


@pytest.mark.parametrize(
    "range, inside",
    [
        ("1.16", "1.16.0"),
        (">=1.16.5-rc.1", "1.16.5"),
        ("1.9.2-rv+trendy", "1.9.2-rv"),
    ],
)
def test_range_versions_only_pad_missing_components(range: str, inside: str):
    r = parse_version_range(range)
    assert r is not None
    assert r.includes(inside)
