"""
Semantic versions and loose version ranges.

Users ask for runtimes with partial versions ("22", "0.15", "1.21.3"). A
partial version denotes the range of every version sharing the given
components, and resolution always picks the highest version inside the range.

Example:
    >>> r = parse_user_version("1.3")
    >>> r.includes_version(SemanticVersion.parse("1.3.1"))
    True
    >>> r.includes_version(SemanticVersion.parse("1.4.0"))
    False
"""

import functools
import re
import sys
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from copper.core.exceptions import (
    InvalidMajorError,
    InvalidMinorError,
    InvalidPatchError,
    InvalidVersionError,
)

MAX_COMPONENT = sys.maxsize
"""Value used for unspecified trailing components of a range's upper bound."""

_SEMVER_RE = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)"
    r"(?:-([0-9A-Za-z]+(?:[.-][0-9A-Za-z]+)*))?"
    r"(?:\+([0-9A-Za-z]+(?:[.-][0-9A-Za-z]+)*))?$",
    re.ASCII,
)

_COMPONENT_RE = re.compile(r"^\d+$", re.ASCII)


@functools.total_ordering
class SemanticVersion:
    """
    Semantic version parser and comparator.

    Ordering follows semver precedence: major, minor and patch compare
    numerically, a release ranks above its prereleases, and prerelease
    identifiers compare one by one (numeric identifiers numerically and below
    alphanumeric ones). Build metadata is kept for display only.

    Example:
        >>> SemanticVersion.parse("1.21.0-rc2") < SemanticVersion.parse("1.21.0")
        True
    """

    __slots__ = ("major", "minor", "patch", "prerelease", "build")

    def __init__(
        self,
        major: int,
        minor: int,
        patch: int,
        prerelease: Optional[str] = None,
        build: Optional[str] = None,
    ):
        if major < 0 or minor < 0 or patch < 0:
            raise InvalidVersionError(
                f"Version components must be non-negative: {major}.{minor}.{patch}"
            )
        self.major = major
        self.minor = minor
        self.patch = patch
        self.prerelease = prerelease or None
        self.build = build or None

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        """
        Parse a full semantic version string.

        Args:
            text: Version such as "22.1.0", "v0.14.1" or "0.16.0-dev.1+abc"

        Returns:
            Parsed SemanticVersion

        Raises:
            InvalidVersionError: If text is not a valid semantic version
        """
        candidate = text.strip()
        if candidate.startswith("v"):
            candidate = candidate[1:]

        match = _SEMVER_RE.match(candidate)
        if not match:
            raise InvalidVersionError(
                f"Invalid version format: {text}. "
                f"Expected format: MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]"
            )

        major, minor, patch, prerelease, build = match.groups()
        return cls(int(major), int(minor), int(patch), prerelease, build)

    def _precedence(self) -> Tuple[Any, ...]:
        if self.prerelease is None:
            pre: Tuple[Any, ...] = (1,)
        else:
            identifiers = []
            for ident in self.prerelease.split("."):
                if ident.isdigit():
                    identifiers.append((0, int(ident), ""))
                else:
                    identifiers.append((1, 0, ident))
            pre = (0, tuple(identifiers))
        return (self.major, self.minor, self.patch, pre)

    def __lt__(self, other: "SemanticVersion") -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text

    def __repr__(self) -> str:
        return f"SemanticVersion('{self}')"


@dataclass(frozen=True)
class VersionRange:
    """Inclusive range of versions. Never empty: min <= max."""

    min: SemanticVersion
    max: SemanticVersion

    def includes_version(self, version: SemanticVersion) -> bool:
        """Check whether version lies within [min, max]."""
        return self.min <= version <= self.max

    def __str__(self) -> str:
        def fmt(v: SemanticVersion) -> str:
            parts = [v.major, v.minor, v.patch]
            return ".".join("max" if p == MAX_COMPONENT else str(p) for p in parts)

        return f"{fmt(self.min)} - {fmt(self.max)}"


def _parse_component(text: str, error_cls) -> int:
    if not _COMPONENT_RE.match(text):
        raise error_cls(f"Invalid version component '{text}': expected an integer")
    return int(text)


def parse_user_version(text: str) -> VersionRange:
    """
    Parse a loose user version into the range it denotes.

    Unspecified trailing components widen the range: the lower bound fills
    them with 0 and the upper bound with MAX_COMPONENT.

    Args:
        text: "MAJOR", "MAJOR.MINOR" or "MAJOR.MINOR.PATCH"

    Returns:
        VersionRange covering every matching version

    Raises:
        InvalidMajorError: If the major component is not an integer
        InvalidMinorError: If the minor component is not an integer
        InvalidPatchError: If the patch component is not an integer, or extra
            components follow it

    Example:
        >>> str(parse_user_version("22"))
        '22.0.0 - 22.max.max'
    """
    parts = text.split(".")

    major = _parse_component(parts[0], InvalidMajorError)

    minor: Optional[int] = None
    if len(parts) > 1:
        minor = _parse_component(parts[1], InvalidMinorError)

    patch: Optional[int] = None
    if len(parts) > 2:
        patch = _parse_component(parts[2], InvalidPatchError)

    if len(parts) > 3:
        raise InvalidPatchError(
            f"Invalid version: {text}. Expected format: MAJOR[.MINOR[.PATCH]]"
        )

    return VersionRange(
        min=SemanticVersion(
            major,
            minor if minor is not None else 0,
            patch if patch is not None else 0,
        ),
        max=SemanticVersion(
            major,
            minor if minor is not None else MAX_COMPONENT,
            patch if patch is not None else MAX_COMPONENT,
        ),
    )


def is_exact_pin(text: str) -> bool:
    """Check whether a loose version names all three components."""
    return len(text.split(".")) == 3


def compare_version_field(a: Any, b: Any) -> int:
    """
    Descending comparator for records carrying a ``version`` attribute.

    Returns a negative number when ``a`` has the higher version, so that
    sorting with it puts the newest version first.
    """
    if a.version > b.version:
        return -1
    if a.version < b.version:
        return 1
    return 0


def sort_by_version(items: Iterable[Any]) -> List[Any]:
    """Sort version-bearing records newest first."""
    return sorted(items, key=functools.cmp_to_key(compare_version_field))
