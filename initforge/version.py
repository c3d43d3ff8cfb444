"""Platform version scheme.

Versions follow the ``MAJOR.MINOR.PATCH[<sep>QUALIFIER[N]]`` scheme used by the
platform catalogs, where the separator is either ``.`` (``2.1.0.RELEASE``,
``2.3.0.RC1``) or ``-`` (``3.3.0-SNAPSHOT``, ``4.0.0-M1``).  Qualifiers order
as ``M < RC < SNAPSHOT < RELEASE``; a version without qualifier is a release.

Ranges use interval notation (``[1.5.0.RELEASE,2.2.0.M3)``) or a bare version
meaning "this version or later".
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Iterable

from .errors import InvalidVersionError


_VERSION_REGEX = re.compile(r"^(\d+)\.(\d+|x)\.(\d+|x)(?:([.\-])([^0-9]+)(\d+)?)?$")
_RANGE_REGEX = re.compile(r"^([(\[])(.*),(.*)([)\]])$")

# Precedence of well-known qualifiers, a release (no qualifier) ranks highest.
_QUALIFIER_RANKS: dict[str, int] = {
    "M": 1,
    "RC": 2,
    "BUILD-SNAPSHOT": 3,
    "SNAPSHOT": 3,
    "RELEASE": 4,
}
_RELEASE_RANK = 4
_UNKNOWN_QUALIFIER_RANK = 0

_VARIABLE_PLACEHOLDER = 999


@dataclass(frozen=True)
class Qualifier:
    """Version qualifier such as ``RC1`` or ``SNAPSHOT``."""

    id: str
    version: int | None = None
    separator: str = "."

    def __str__(self) -> str:
        suffix = str(self.version) if self.version is not None else ""
        return f"{self.id}{suffix}"

    @property
    def rank(self) -> int:
        return _QUALIFIER_RANKS.get(self.id, _UNKNOWN_QUALIFIER_RANK)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A parsed platform version."""

    major: int
    minor: int
    patch: int
    qualifier: Qualifier | None = None

    # -- Parsing -----------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse *text*, raising ``InvalidVersionError`` when it is malformed."""
        return _DEFAULT_PARSER.parse(text)

    @classmethod
    def safe_parse(cls, text: str) -> "Version | None":
        """Parse *text*, returning ``None`` instead of raising."""
        try:
            return cls.parse(text)
        except InvalidVersionError:
            return None

    # -- Release type ------------------------------------------------------

    @property
    def is_release(self) -> bool:
        return self.qualifier is None or self.qualifier.id == "RELEASE"

    @property
    def is_snapshot(self) -> bool:
        return self.qualifier is not None and "SNAPSHOT" in self.qualifier.id

    @property
    def is_milestone(self) -> bool:
        return not self.is_release and not self.is_snapshot

    # -- Comparison --------------------------------------------------------

    def _sort_key(self) -> tuple[int, int, int, int, str, int]:
        if self.qualifier is None:
            return (self.major, self.minor, self.patch, _RELEASE_RANK, "", 0)
        return (
            self.major,
            self.minor,
            self.patch,
            self.qualifier.rank,
            self.qualifier.id,
            self.qualifier.version or 0,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.qualifier is not None:
            text += f"{self.qualifier.separator}{self.qualifier}"
        return text


@dataclass(frozen=True)
class VersionRange:
    """A range of versions with optional upper bound."""

    lower: Version
    lower_inclusive: bool = True
    upper: Version | None = None
    upper_inclusive: bool = False

    @classmethod
    def parse(cls, text: str) -> "VersionRange":
        return _DEFAULT_PARSER.parse_range(text)

    def match(self, version: Version) -> bool:
        """Return ``True`` if *version* lies within this range."""
        if version < self.lower or (not self.lower_inclusive and version == self.lower):
            return False
        if self.upper is not None:
            if version > self.upper or (not self.upper_inclusive and version == self.upper):
                return False
        return True

    def __contains__(self, version: Version) -> bool:
        return self.match(version)

    def __str__(self) -> str:
        text = (">=" if self.lower_inclusive else ">") + str(self.lower)
        if self.upper is not None:
            text += " and " + ("<=" if self.upper_inclusive else "<") + str(self.upper)
        return text


class VersionParser:
    """Parses versions and ranges.

    Variable versions such as ``1.3.x`` are resolved against *latest_versions*:
    the highest known version with the same major (and minor) wins.  When no
    known version matches, the ``x`` components become ``999`` so that the
    resolved version still sorts after every concrete version of that line.
    """

    def __init__(self, latest_versions: Iterable[Version] = ()) -> None:
        self.latest_versions = sorted(latest_versions, reverse=True)

    def parse(self, text: str) -> Version:
        if text is None or not str(text).strip():
            raise InvalidVersionError(str(text), "version must not be empty")
        value = str(text).strip()
        match = _VERSION_REGEX.match(value)
        if match is None:
            raise InvalidVersionError(value, "expected MAJOR.MINOR.PATCH[.QUALIFIER]")

        major = int(match.group(1))
        minor_text, patch_text = match.group(2), match.group(3)
        qualifier = None
        if match.group(5):
            qualifier = Qualifier(
                id=match.group(5),
                version=int(match.group(6)) if match.group(6) else None,
                separator=match.group(4),
            )

        if minor_text == "x" or patch_text == "x":
            resolved = self._match_latest(major, minor_text, qualifier)
            if resolved is not None:
                return resolved
            minor = _VARIABLE_PLACEHOLDER if minor_text == "x" else int(minor_text)
            patch = _VARIABLE_PLACEHOLDER
            return Version(major, minor, patch, qualifier)

        return Version(major, int(minor_text), int(patch_text), qualifier)

    def safe_parse(self, text: str) -> Version | None:
        try:
            return self.parse(text)
        except InvalidVersionError:
            return None

    def parse_range(self, text: str) -> VersionRange:
        if text is None or not str(text).strip():
            raise InvalidVersionError(str(text), "range must not be empty")
        value = str(text).strip()
        match = _RANGE_REGEX.match(value)
        if match is None:
            return VersionRange(self.parse(value))
        lower = self.parse(match.group(2))
        upper = self.parse(match.group(3))
        return VersionRange(
            lower=lower,
            lower_inclusive=match.group(1) == "[",
            upper=upper,
            upper_inclusive=match.group(4) == "]",
        )

    def _match_latest(
        self, major: int, minor_text: str, qualifier: Qualifier | None
    ) -> Version | None:
        for candidate in self.latest_versions:
            if candidate.major != major:
                continue
            if minor_text != "x" and candidate.minor != int(minor_text):
                continue
            if qualifier is not None and (
                candidate.qualifier is None or candidate.qualifier.id != qualifier.id
            ):
                continue
            return candidate
        return None


_DEFAULT_PARSER = VersionParser()


def is_variable(text: str) -> bool:
    """Whether *text* is a variable version such as ``3.4.x``."""
    match = _VERSION_REGEX.match(str(text).strip())
    return match is not None and "x" in (match.group(2), match.group(3))
