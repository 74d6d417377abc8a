"""Verdict engine: classification, then index lookup, then range matching."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from .classifier import Classification, SupportStatus, classify
from .errors import RangeParseError
from .models import VulnerabilityIndex
from .schedule import ReleaseScheduleProvider
from .versions import VersionLike, is_affected, parse_version

logger = logging.getLogger(__name__)


class IndexSource(Protocol):
    def get(self) -> VulnerabilityIndex:
        ...


@dataclass(frozen=True)
class Finding:
    """A vulnerability that applies to the checked version.

    Attributes:
        key: Entry key in the index.
        identifier: CVE id(s), or the key when the entry has none.
        overview: Human summary.
        patched: Patched range hint, ``None`` if no fix exists.
    """

    key: str
    identifier: str
    overview: str
    patched: str | None = None

    def __str__(self) -> str:
        patched = self.patched if self.patched is not None else "none"
        return f"{self.identifier}: {self.overview}\nPatched versions: {patched}"


@dataclass
class Verdict:
    """Outcome of a check.

    Attributes:
        blocked: ``True`` if the version must not be used.
        reasons: Human-readable reasons; non-empty iff ``blocked``.
        status: Support status, ``None`` when classification was skipped.
        findings: Vulnerabilities found, in index order.
    """

    blocked: bool
    reasons: list[str] = field(default_factory=list)
    status: SupportStatus | None = None
    findings: list[Finding] = field(default_factory=list)


def get_vulnerability_list(version: VersionLike, index: VulnerabilityIndex) -> list[Finding]:
    """Collect the entries of ``index`` that affect ``version``.

    Args:
        version: Concrete version.
        index: Vulnerability index.

    Returns:
        Findings in index iteration order.

    Raises:
        RangeParseError: If an entry's range is malformed; the message
            names the offending entry.
    """
    v = parse_version(version)
    findings: list[Finding] = []
    for key, entry in index.items():
        try:
            affected = is_affected(v, entry.vulnerable, entry.patched)
        except RangeParseError as e:
            raise RangeParseError(f"Entry {key} ({entry.identifier(key)}): {e}") from e
        if affected:
            findings.append(
                Finding(key=key, identifier=entry.identifier(key), overview=entry.overview, patched=entry.patched)
            )
    return findings


def is_vulnerable(version: VersionLike, cache: IndexSource) -> bool:
    """Return ``True`` if any index entry affects ``version``."""
    return len(get_vulnerability_list(version, cache.get())) > 0


def _blocked_by_support(version: VersionLike, c: Classification) -> Verdict | None:
    if c.end_of_life:
        reason = f"{version} is end-of-life. There are high chances of being vulnerable. Please upgrade it."
        return Verdict(blocked=True, reasons=[reason], status=c.status)
    if not c.supported:
        reason = (
            f"You may be at risk. {version} is not an actively supported Node.js version, "
            "so unable to check vulnerabilities."
        )
        return Verdict(blocked=True, reasons=[reason], status=c.status)
    return None


def evaluate(
    version: VersionLike,
    schedule: ReleaseScheduleProvider,
    cache: IndexSource,
    now: datetime | None = None,
) -> Verdict:
    """Decide whether ``version`` is allowed.

    End-of-life is checked before support; either short-circuits without
    touching the index.

    Args:
        version: Concrete version.
        schedule: Release schedule provider.
        cache: Source of the vulnerability index.
        now: Reference time for the schedule checks.

    Returns:
        ``Verdict``.

    Raises:
        ParseError, VersionLookupError, AmbiguousVersionError: from classification.
        FetchError, MalformedSnapshotError: from the index cache.
        RangeParseError: from a malformed index entry.
    """
    c = classify(version, schedule, now)
    logger.debug("Classified %s: %s", version, c.detail)
    blocked = _blocked_by_support(version, c)
    if blocked is not None:
        return blocked

    findings = get_vulnerability_list(version, cache.get())
    return Verdict(
        blocked=bool(findings),
        reasons=[str(f) for f in findings],
        status=c.status,
        findings=findings,
    )
