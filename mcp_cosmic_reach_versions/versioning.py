"""Version parsing, ordering and range matching.

Canonical game versions are semantic-version-like strings
(``MAJOR.MINOR[.PATCH][-PRERELEASE][+BUILD]``). They are parsed with
``semantic_version`` (missing components are padded, so ``1.17`` is
``1.17.0``) and compared by semver precedence, build metadata ignored.

Range grammar:

- comparators ``<``, ``<=``, ``>``, ``>=``, ``=``/``==`` or a bare version
  (exact match); whitespace-separated comparators are intersected, e.g.
  ``>1.16.4 <=1.16.5``
- interval notation: ``[1.16,1.17)``, ``(1.17,1.18]``, ``(,1.16]``, ``[1.17]``
- ``*`` matches any version
- ``||`` unions alternatives; a list of expressions is unioned as well

Pre-releases are ordered, never filtered out: ``<=1.18`` includes
``1.18-alpha.21.44.a`` because it sorts before ``1.18``.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from functools import cmp_to_key
from typing import Callable, Final, Iterable, Optional, Sequence, Tuple, Union

from semantic_version import Version

_logger = logging.getLogger(__name__)


class VersionType(str, Enum):
    """Stability class of a version."""

    RELEASE = "release"
    BETA = "beta"
    ALPHA = "alpha"


VersionLike = Union[str, Version]


def _validate_input(version: str) -> str:
    if version is None:
        raise ValueError("version must be a non-empty string, got None")
    s = version.strip()
    if not s:
        raise ValueError("version must be a non-empty string")
    return s


def _normalize_version_prefix(s: str) -> str:
    # Drop a leading 'v' prefix commonly used, e.g. v2.0
    if s and (s[0] == "v" or s[0] == "V"):
        if len(s) > 1 and s[1].isdigit():
            return s[1:]
    return s


def parse_version(version: VersionLike) -> Version:
    """Parse a version string into a comparable ``semantic_version.Version``.

    Raises ValueError for empty input or strings without a numeric core.
    """

    if isinstance(version, Version):
        return version
    return Version.coerce(_normalize_version_prefix(_validate_input(version)))


def _parse_range_version(token: str) -> Version:
    # Only a missing MINOR or PATCH is filled in; anything else coerce would
    # have to repair (e.g. "1.17.-1", "1.16.5.1") is rejected
    m = _RANGE_VERSION.fullmatch(_normalize_version_prefix(_validate_input(token)))
    if m is None:
        raise ValueError(f"invalid version in range: {token!r}")
    major, minor, patch, rest = m.groups()
    core = ".".join(str(int(p or 0)) for p in (major, minor, patch))
    return Version(core + (rest or ""))


def _compare_parsed(a: Version, b: Version) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def compare_versions(a: VersionLike, b: VersionLike) -> int:
    """Compare two versions.

    Returns -1 if a < b, 0 if equal, 1 if a > b. Build metadata does not take
    part in the comparison.
    """
    return _compare_parsed(parse_version(a), parse_version(b))


def sort_versions(versions: Iterable[VersionLike]) -> list[VersionLike]:
    """Return a new list of versions sorted lowest to highest."""
    items = list(versions)
    for v in items:
        parse_version(v)
    return sorted(items, key=cmp_to_key(compare_versions))


# -----------------------------
# Ranges
# -----------------------------

_OPERATORS: Final[dict[str, Callable[[int], bool]]] = {
    "<": lambda c: c < 0,
    "<=": lambda c: c <= 0,
    ">": lambda c: c > 0,
    ">=": lambda c: c >= 0,
    "=": lambda c: c == 0,
    "==": lambda c: c == 0,
}

_INTERVAL: Final[re.Pattern[str]] = re.compile(
    r"(?x)"
    r"([\[(])\s*"  # opening bracket
    r"([^,\[\]()\s]*)\s*"  # lower bound (may be empty)
    r"(?:,\s*([^,\[\]()\s]*)\s*)?"  # optional upper bound
    r"([\])])"  # closing bracket
)

_COMPARATOR: Final[re.Pattern[str]] = re.compile(r"(<=|>=|==|<|>|=)?\s*([^\s<>=]+)")

_RANGE_VERSION: Final[re.Pattern[str]] = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?([-+].*)?")

_Comparator = Tuple[str, Version]
_Alternative = Tuple[_Comparator, ...]


class VersionRange:
    """A set of versions; only membership is observable."""

    def includes(self, version: VersionLike) -> bool:
        raise NotImplementedError

    def __contains__(self, version: VersionLike) -> bool:
        return self.includes(version)

    def __or__(self, other: "VersionRange") -> "VersionRange":
        return _UnionVersionRange((self, other))


class _ComparatorVersionRange(VersionRange):
    """Union of alternatives; each alternative is an intersection of comparators."""

    def __init__(self, alternatives: Sequence[_Alternative], text: str) -> None:
        self._alternatives = tuple(alternatives)
        self._text = text

    def includes(self, version: VersionLike) -> bool:
        try:
            parsed = parse_version(version)
        except ValueError:
            return False
        return any(
            all(_OPERATORS[op](_compare_parsed(parsed, target)) for op, target in alternative)
            for alternative in self._alternatives
        )

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"VersionRange({self._text!r})"


class _UnionVersionRange(VersionRange):
    def __init__(self, ranges: Sequence[VersionRange]) -> None:
        self._ranges = tuple(ranges)

    def includes(self, version: VersionLike) -> bool:
        return any(r.includes(version) for r in self._ranges)

    def __str__(self) -> str:
        return " || ".join(str(r) for r in self._ranges)


class _NoneVersionRange(VersionRange):
    """Matches nothing. The label keeps the text that failed to parse."""

    def __init__(self, label: str) -> None:
        self._label = label

    def includes(self, version: VersionLike) -> bool:
        return False

    def __or__(self, other: VersionRange) -> VersionRange:
        return other

    def __str__(self) -> str:
        return self._label

    def __repr__(self) -> str:
        return f"none_version_range({self._label!r})"


def none_version_range(label: str = "") -> VersionRange:
    """Return a range that matches no version."""
    return _NoneVersionRange(label)


def _parse_interval(match: re.Match[str]) -> _Alternative:
    opening, lower, upper, closing = match.groups()
    if upper is None:
        # "[1.17]" is an exact version; "(1.17)" has no meaning
        if opening != "[" or closing != "]" or not lower:
            raise ValueError(f"invalid interval {match.group(0)!r}")
        return (("=", _parse_range_version(lower)),)

    comparators: list[_Comparator] = []
    if lower:
        comparators.append((">=" if opening == "[" else ">", _parse_range_version(lower)))
    if upper:
        comparators.append(("<=" if closing == "]" else "<", _parse_range_version(upper)))
    return tuple(comparators)


def _parse_alternative(text: str) -> _Alternative:
    s = text.strip()
    if not s:
        raise ValueError("empty version range alternative")
    if s == "*":
        return ()

    interval = _INTERVAL.fullmatch(s)
    if interval:
        return _parse_interval(interval)

    comparators: list[_Comparator] = []
    pos = 0
    for m in _COMPARATOR.finditer(s):
        # Anything other than whitespace between comparators is garbage
        if s[pos : m.start()].strip():
            break
        op, version = m.groups()
        comparators.append((op or "=", _parse_range_version(version)))
        pos = m.end()
    if s[pos:].strip():
        raise ValueError(f"invalid version range {s!r}")
    return tuple(comparators)


def parse_version_range(ranges: Union[str, Iterable[str]]) -> Optional[VersionRange]:
    """Parse one or more range expressions into a single unioned range.

    Returns None when any expression cannot be parsed, or when there is
    nothing to parse.
    """

    items = [ranges] if isinstance(ranges, str) else list(ranges)
    alternatives: list[_Alternative] = []
    try:
        for item in items:
            for part in item.split("||"):
                alternatives.append(_parse_alternative(part))
    except (ValueError, TypeError, AttributeError) as e:
        _logger.debug("unparseable version range", extra={"op": "parse_range", "error": str(e)})
        return None

    if not alternatives:
        return None
    return _ComparatorVersionRange(alternatives, " || ".join(i.strip() for i in items))


__all__ = [
    "VersionType",
    "VersionRange",
    "parse_version",
    "compare_versions",
    "sort_versions",
    "parse_version_range",
    "none_version_range",
]
