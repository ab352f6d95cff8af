"""Cosmic Reach version normalization and range resolution.

Raw version ids come in many historical shapes (``1.16.5``, ``20w45a``,
``1.16.5-rc1``, ``1.14.2 Pre-Release 4``, ``b1.8.1``, ``c0.0.13a_03``,
``rd-20090515``, April Fools builds...). They are rewritten into one
semantic-version-like form so ranges can be evaluated over them:

- ``20w45a`` -> ``1.17-alpha.20.45.a``
- ``1.16.5-rc1`` -> ``1.16.5-rc.1``
- ``1.17.1-pre1`` -> ``1.17.1-beta.1`` (``rc`` for releases up to 1.16)
- ``b1.8.1`` -> ``1.0.0-beta.8.1``
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Iterable, Mapping, Optional, Sequence, Union

from .manifest import RELEASE_REGEX, SNAPSHOT_REGEX, find_nearest_release_version
from .models import CosmicReachVersion, VersionManifestEntry
from .versioning import VersionRange, none_version_range, parse_version_range

_logger = logging.getLogger(__name__)

# Every shape of version id the base grammar understands
VERSION_PATTERN: Final[str] = (
    r"0\.\d+(?:\.\d+)?a?(?:_\d+)?|"
    r"\d+\.\d+(?:\.\d+)?(?:-pre\d+| Pre-[Rr]elease \d+|-rc\d+| [Rr]elease Candidate \d+)?|"
    r"\d+w\d+(?:[a-z]+|~)|"
    r"[a-c]\d\.\d+(?:\.\d+)?[a-z]?(?:_\d+)?[a-z]?|"
    r"(Alpha|Beta) v?\d+\.\d+(?:\.\d+)?[a-z]?(?:_\d+)?[a-z]?|"
    r"Inf?dev (?:0\.31 )?\d+(?:-\d+)?|"
    r"(?:rd|inf)-\d+|"
    r"(?:.*[Ee]xperimental [Ss]napshot )(?:\d+)"
)

VERSION_REGEX: Final[re.Pattern[str]] = re.compile(VERSION_PATTERN)

_PRE_RELEASE_REGEX: Final[re.Pattern[str]] = re.compile(r".+(?:-pre| Pre-[Rr]elease )(\d+)")
_RELEASE_CANDIDATE_REGEX: Final[re.Pattern[str]] = re.compile(
    r".+(?:-rc| [Rr]elease Candidate )(\d+)"
)
_EXPERIMENTAL_REGEX: Final[re.Pattern[str]] = re.compile(r"(?:.*[Ee]xperimental [Ss]napshot )(\d+)")
_BETA_REGEX: Final[re.Pattern[str]] = re.compile(
    r"(?:b|Beta v?)1\.(\d+(\.\d+)?[a-z]?(_\d+)?[a-z]?)"
)
_ALPHA_REGEX: Final[re.Pattern[str]] = re.compile(
    r"(?:a|Alpha v?)[01]\.(\d+(\.\d+)?[a-z]?(_\d+)?[a-z]?)"
)
_INDEV_REGEX: Final[re.Pattern[str]] = re.compile(r"(?:inf-|Inf?dev )(?:0\.31 )?(\d+(-\d+)?)")

# Releases up to and including this one number pre-releases as release candidates
_LEGACY_RANGE = parse_version_range("<=1.16")

# 1.16 release candidates were published after 8 pre-releases and are numbered on top of them
_RENUMBERED_RC_RELEASE: Final[str] = "1.16"
_RENUMBERED_RC_OFFSET: Final[int] = 8

# April Fools and other one-off builds that follow no pattern
SPECIAL_VERSIONS: Final[Mapping[str, str]] = {
    "13w12~": "1.5.1-alpha.13.12.a",
    "2point0_red": "1.5.2-red",
    "2point0_purple": "1.5.2-purple",
    "2point0_blue": "1.5.2-blue",
    "15w14a": "1.8.4-alpha.15.14.a+loveandhugs",
    "1.RV-Pre1": "1.9.2-rv+trendy",
    "3D Shareware v1.34": "1.14-alpha.19.13.shareware",
    "1.14.3 - Combat Test": "1.14.3-rc.4.combat.1",
    "Combat Test 2": "1.14.5-combat.2",
    "Combat Test 3": "1.14.5-combat.3",
    "Combat Test 4": "1.15-rc.3.combat.4",
    "Combat Test 5": "1.15.2-rc.2.combat.5",
    "20w14~": "1.16-alpha.20.13.inf",
    "20w14infinite": "1.16-alpha.20.13.inf",
    "Combat Test 6": "1.16.2-beta.3.combat.6",
    "Combat Test 7": "1.16.3-combat.7",
    "1.16_combat-2": "1.16.3-combat.7.b",
    "1.16_combat-3": "1.16.3-combat.7.c",
    "1.16_combat-4": "1.16.3-combat.8",
    "1.16_combat-5": "1.16.3-combat.8.b",
    "1.16_combat-6": "1.16.3-combat.8.c",
    "22w13oneblockatatime": "1.19-alpha.22.13.oneblockatatime",
    "23w13a_or_b": "1.20-alpha.23.13.ab",
}


def normalize_version(
    version: str,
    versions: Optional[Sequence[VersionManifestEntry]] = None,
    index: Optional[int] = None,
) -> str:
    """Normalize a raw Cosmic Reach version id.

    With ``versions`` (indexed manifest entries, newest first) the enclosing
    release is looked up in the manifest; ``index`` is the position of
    ``version`` there and is searched by id when omitted. Without a manifest
    the first release-like number in the id is used.

    Never raises for string input.
    """

    if versions is not None:
        if index is None:
            index = next((i for i, e in enumerate(versions) if e.id == version), None)
        if index is not None:
            release = find_nearest_release_version(versions, index)
        else:
            release = _release_in(version)
    else:
        release = _release_in(version)

    return _normalize_unknown_version(version, release)


def normalize_version_range(
    range: Union[str, Iterable[str], VersionRange],
    versions: Mapping[str, CosmicReachVersion],
    version_regex: re.Pattern[str],
) -> VersionRange:
    """Rewrite every version id in ``range`` to its canonical form and parse it.

    Ids known to ``versions`` take the catalog's canonical version, anything
    else the regex matches is normalized without context. Returns a range that
    matches nothing when the result cannot be parsed.
    """

    if isinstance(range, VersionRange):
        return range

    ranges = [range] if isinstance(range, str) else list(range)

    def _replace(match: re.Match[str]) -> str:
        known = versions.get(match.group(0))
        if known is not None:
            return str(known.version)
        return normalize_version(match.group(0))

    normalized = [version_regex.sub(_replace, r) for r in ranges]
    parsed = parse_version_range(normalized)
    if parsed is None:
        _logger.debug(
            "version range matches nothing",
            extra={"op": "normalize_range", "range": " || ".join(normalized)},
        )
        return none_version_range(" || ".join(normalized))
    return parsed


def get_version_regex(versions: Optional[Iterable[str]] = None) -> re.Pattern[str]:
    """Return a regex that matches Cosmic Reach version ids.

    Every id in ``versions`` the base grammar cannot reproduce exactly is
    added as a literal alternative, ahead of the base grammar.
    """

    if versions is None:
        return VERSION_REGEX

    pattern = VERSION_PATTERN
    for version in versions:
        match = VERSION_REGEX.search(version)
        if match is None or match.group(0) != version:
            pattern = f"{re.escape(version)}|{pattern}"
    return re.compile(pattern, re.DOTALL)


def is_legacy_version(version: str) -> bool:
    """Whether ``version`` is a release up to 1.16, which used rc for pre-releases."""
    return _LEGACY_RANGE is not None and _LEGACY_RANGE.includes(version)


def _release_in(version: str) -> Optional[str]:
    match = RELEASE_REGEX.search(version)
    return match.group(0) if match else None


def _normalize_unknown_version(version: str, release: Optional[str] = None) -> str:
    special = SPECIAL_VERSIONS.get(version)
    if special is not None:
        return special

    if not release or version == release or version[1:].startswith(release):
        return _normalize_old_version(version)

    experimental = _EXPERIMENTAL_REGEX.search(version)
    if experimental:
        return f"{release}-Experimental.{int(experimental.group(1))}"

    if version.startswith(release):
        rc = _RELEASE_CANDIDATE_REGEX.search(version)
        pre = _PRE_RELEASE_REGEX.search(version) if rc is None else None
        if rc:
            build = int(rc.group(1))
            if release == _RENUMBERED_RC_RELEASE:
                build += _RENUMBERED_RC_OFFSET
            version = f"rc.{build}"
        elif pre:
            version = f"{'rc' if is_legacy_version(release) else 'beta'}.{int(pre.group(1))}"
    else:
        snapshot = SNAPSHOT_REGEX.search(version)
        if snapshot:
            year, week, letter = snapshot.groups()
            version = f"alpha.{int(year)}.{week}.{letter}"
        else:
            version = _normalize_old_version(version)

    if version.startswith(f"{release}-"):
        return version
    return f"{release}-{version}"


def _normalize_old_version(version: str) -> str:
    """Rewrite pre-modern ids (alpha, beta, indev, classic, pre-classic).

    Known prefixes are expanded first, then the result is canonicalized into
    dot/hyphen separated form.
    """

    beta = _BETA_REGEX.search(version)
    alpha = _ALPHA_REGEX.search(version) if beta is None else None
    indev = _INDEV_REGEX.search(version) if beta is None and alpha is None else None
    if beta:
        version = f"1.0.0-beta.{beta.group(1)}"
    elif alpha:
        version = f"1.0.0-alpha.{alpha.group(1)}"
    elif indev:
        version = f"0.31.{indev.group(1)}"
    elif version.startswith("c0."):
        version = version[1:]
    elif version.startswith("rd-"):
        version = version[3:]
        if version == "20090515":
            version = "150000"
        version = f"0.0.0-rd.{version}"

    return _canonicalize(version)


class _CharClass(Enum):
    DIGIT = auto()
    SEPARATOR = auto()
    LETTER = auto()
    OTHER = auto()


def _char_class(c: str) -> _CharClass:
    if "0" <= c <= "9":
        return _CharClass.DIGIT
    if c == "." or c == "-":
        return _CharClass.SEPARATOR
    if "A" <= c <= "Z" or "a" <= c <= "z":
        return _CharClass.LETTER
    return _CharClass.OTHER


@dataclass
class _ScanState:
    was_digit: bool = False
    was_leading_zero: bool = False
    was_separator: bool = False
    has_hyphen: bool = False


def _canonicalize(version: str) -> str:
    """Rewrite ``version`` into dot/hyphen separated components.

    - a digit run following a letter or symbol starts a new ``.`` component
    - leading zeros of a number are dropped (``01`` -> ``1``, ``0`` stays)
    - runs of separators collapse into one; symbols become ``.``
    - a letter right after a digit opens the pre-release with ``-`` the first
      time, ``.`` afterwards
    - leading and trailing dots are trimmed
    """

    out: list[str] = []
    state = _ScanState()
    for i, c in enumerate(version):
        kind = _char_class(c)
        if kind is _CharClass.DIGIT:
            if i > 0 and not state.was_digit and not state.was_separator:
                out.append(".")
            elif state.was_digit and state.was_leading_zero:
                out.pop()
            state.was_leading_zero = c == "0" and (not state.was_digit or state.was_leading_zero)
            state.was_separator = False
            state.was_digit = True
        elif kind is _CharClass.SEPARATOR or kind is _CharClass.OTHER:
            if state.was_separator:
                continue
            if kind is _CharClass.OTHER:
                c = "."
            state.was_separator = True
            state.was_digit = False
        else:
            if state.was_digit:
                out.append("." if state.has_hyphen else "-")
                state.has_hyphen = True
            state.was_separator = False
            state.was_digit = False

        if c == "-":
            state.has_hyphen = True
        out.append(c)

    return "".join(out).strip(".")


__all__ = [
    "VERSION_PATTERN",
    "VERSION_REGEX",
    "SPECIAL_VERSIONS",
    "normalize_version",
    "normalize_version_range",
    "get_version_regex",
    "is_legacy_version",
]
