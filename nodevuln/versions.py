"""Semantic version parsing and range matching.

Pure functions over npm-style semver ranges (``>=18.0.0 <18.6.0``,
``^20.1.0 || ~21.0.0``).  Comparison and pre-release ordering follow the
semver specification through ``node-semver``.  No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import nodesemver

from .errors import ParseError, RangeParseError


@dataclass(frozen=True)
class Version:
    """A parsed, immutable semantic version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        prerelease: Pre-release identifiers (``("rc", "1")``), empty if none.
        build: Build metadata identifiers, empty if none.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    @property
    def line(self) -> str:
        """Release line name as used by the Node.js release schedule (``v18``, ``v0.12``)."""
        if self.major == 0:
            return f"v0.{self.minor}"
        return f"v{self.major}"


VersionLike = Union[Version, str]


def parse_version(text: VersionLike) -> Version:
    """Parse a version string such as ``v18.5.0`` or ``20.0.0-rc.1``.

    Args:
        text: Version string; a leading ``v`` is accepted.

    Returns:
        Parsed ``Version``.

    Raises:
        ParseError: If ``text`` is not a valid semantic version.
    """
    if isinstance(text, Version):
        return text
    try:
        sv = nodesemver.make_semver(text.strip(), False)
    except (AttributeError, TypeError, ValueError) as e:
        raise ParseError(f"Invalid version: {text!r}") from e
    return Version(
        major=int(sv.major),
        minor=int(sv.minor),
        patch=int(sv.patch),
        prerelease=tuple(str(p) for p in sv.prerelease),
        build=tuple(str(b) for b in sv.build),
    )


def check_range(range_expr: str) -> None:
    """Raise ``RangeParseError`` if ``range_expr`` is not a valid semver range."""
    try:
        nodesemver.make_range(range_expr, False)
    except (AttributeError, TypeError, ValueError) as e:
        raise RangeParseError(f"Invalid range expression: {range_expr!r}") from e


def satisfies(version: VersionLike, range_expr: str | None) -> bool:
    """Return ``True`` if ``version`` falls inside ``range_expr``.

    A ``None`` range matches nothing.

    Raises:
        ParseError: If ``version`` is an unparsable string.
        RangeParseError: If ``range_expr`` is malformed.
    """
    if range_expr is None:
        return False
    v = parse_version(version) if isinstance(version, str) else version
    check_range(range_expr)
    return bool(nodesemver.satisfies(str(v), range_expr, False))


def is_affected(version: VersionLike, vulnerable: str | None, patched: str | None) -> bool:
    """Decide whether ``version`` is affected by a vulnerability.

    A version is affected when it is inside the vulnerable range and not
    inside the patched range.  Both ranges are validated up front, so a
    malformed patched range is reported even for versions outside the
    vulnerable range.

    Args:
        version: Concrete version.
        vulnerable: Range of affected versions.
        patched: Range of fixed versions, or ``None`` when no fix exists.

    Returns:
        ``True`` if the version is affected.

    Raises:
        RangeParseError: If either range is malformed.
    """
    if patched is not None:
        check_range(patched)
    return satisfies(version, vulnerable) and not satisfies(version, patched)
