"""Node.js release schedule provider.

Joins the nodejs.org release listing (``dist/index.json``, one row per
published version) with the Release WG ``schedule.json`` (start, LTS,
maintenance and end dates per release line) into ``ReleaseRecord`` rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

import nodesemver
import requests

from .config import Settings
from .downloaders import get_json, requests_session
from .errors import FetchError, ParseError, RangeParseError
from .versions import check_range, parse_version

logger = logging.getLogger(__name__)


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(value: Any) -> datetime | None:
    """Parse a ``YYYY-MM-DD`` (or ISO 8601) string as a UTC datetime.

    A bare date becomes midnight UTC of that day.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


@dataclass(frozen=True)
class ReleaseRecord:
    """One published Node.js release and the schedule of its line.

    Attributes:
        version: Version string without the ``v`` prefix.
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        line: Release line name (``v18``, ``v0.12``).
        codename: LTS codename, if the line has one.
        start: Line start date.
        lts: Date the line entered Active LTS.
        maintenance: Date the line entered Maintenance.
        end: Last day of support; ``None`` for undated legacy lines.
        release_date: Publication date of this exact version.
        security: Whether this release is flagged as a security release.
    """

    version: str
    major: int
    minor: int
    patch: int
    line: str
    codename: str | None = None
    start: datetime | None = None
    lts: datetime | None = None
    maintenance: datetime | None = None
    end: datetime | None = None
    release_date: datetime | None = None
    security: bool = False

    def phase(self, now: datetime) -> str:
        """Support phase of this release's line at ``now``."""
        if self.start is None:
            return "Unscheduled"
        if self.end is not None and now > self.end:
            return "End-of-Life"
        if self.maintenance is not None and now >= self.maintenance:
            return "Maintenance"
        if self.lts is not None and now >= self.lts:
            return "Active LTS"
        if now >= self.start:
            return "Current"
        return "Pending"

    def is_supported(self, now: datetime) -> bool:
        """``True`` while the line is between its start and end dates."""
        return self.start is not None and self.end is not None and self.start < now < self.end

    def _sort_key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


class ReleaseScheduleProvider(Protocol):
    """Answer the two questions the support classifier asks."""

    def supported_majors(self, now: datetime | None = None) -> set[int]:
        ...

    def lookup(self, query: str, now: datetime | None = None) -> list[ReleaseRecord]:
        ...


def build_records(dist: list[dict[str, Any]], schedule: dict[str, dict[str, Any]]) -> list[ReleaseRecord]:
    """Join release listing rows with their line schedule.

    Rows whose version does not parse are skipped.

    Args:
        dist: Decoded ``dist/index.json``.
        schedule: Decoded ``schedule.json``.

    Returns:
        Records in listing order.
    """
    records: list[ReleaseRecord] = []
    for row in dist:
        if not isinstance(row, dict):
            continue
        try:
            v = parse_version(str(row.get("version") or ""))
        except ParseError:
            logger.debug("Skipping unparsable release %r", row.get("version"))
            continue
        line = v.line
        s = schedule.get(line) or {}
        lts_name = row.get("lts")
        codename = s.get("codename") or (lts_name if isinstance(lts_name, str) else None)
        records.append(
            ReleaseRecord(
                version=str(v),
                major=v.major,
                minor=v.minor,
                patch=v.patch,
                line=line,
                codename=codename,
                start=parse_date(s.get("start")),
                lts=parse_date(s.get("lts")),
                maintenance=parse_date(s.get("maintenance")),
                end=parse_date(s.get("end")),
                release_date=parse_date(row.get("date")),
                security=bool(row.get("security")),
            )
        )
    return records


class ReleaseSchedule:
    """Release schedule backed by nodejs.org and the Release WG.

    Both documents are fetched once per instance, on first use.

    Attributes:
        settings: URLs and timeouts.
        session: HTTP session.
    """

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or Settings()
        self.session = session or requests_session()
        self._records: list[ReleaseRecord] | None = None

    def records(self) -> list[ReleaseRecord]:
        """All published releases.

        Raises:
            FetchError: If either document cannot be downloaded.
        """
        if self._records is None:
            timeout = self.settings.timeout
            try:
                dist = get_json(self.session, self.settings.dist_url, timeout=timeout)
                schedule = get_json(self.session, self.settings.schedule_url, timeout=timeout)
            except (requests.RequestException, ValueError) as e:
                raise FetchError(f"Could not fetch the Node.js release schedule: {e}") from e
            if not isinstance(dist, list) or not isinstance(schedule, dict):
                raise FetchError("Unexpected release schedule format")
            self._records = build_records(dist, schedule)
            logger.debug("Loaded %d release records", len(self._records))
        return self._records

    def line_heads(self) -> list[ReleaseRecord]:
        """Newest release of every line, newest line first."""
        heads: dict[str, ReleaseRecord] = {}
        for r in self.records():
            best = heads.get(r.line)
            if best is None or r._sort_key() > best._sort_key():
                heads[r.line] = r
        return sorted(heads.values(), key=ReleaseRecord._sort_key, reverse=True)

    def supported(self, now: datetime | None = None) -> list[ReleaseRecord]:
        """Head record of every line currently in support."""
        now = now or datetime.now(timezone.utc)
        return [r for r in self.line_heads() if r.is_supported(now)]

    def supported_majors(self, now: datetime | None = None) -> set[int]:
        return {r.major for r in self.supported(now)}

    def lookup(self, query: str, now: datetime | None = None) -> list[ReleaseRecord]:
        """Resolve an alias or semver range to release records.

        ``supported``, ``current``, ``lts`` and LTS codenames resolve to
        line heads.  Anything else is treated as a range; a concrete
        version yields at most one record, a bare major yields the whole
        line, and an invalid range yields nothing.

        Args:
            query: Alias, codename, version or range.
            now: Reference time for the aliases.

        Returns:
            Matching records.
        """
        now = now or datetime.now(timezone.utc)
        q = query.strip().lower()
        if q == "supported":
            return self.supported(now)
        if q == "current":
            return self.line_heads()[:1]
        if q == "lts":
            return [
                r for r in self.line_heads() if r.lts is not None and r.end is not None and r.lts < now < r.end
            ]
        by_codename = [r for r in self.line_heads() if r.codename and r.codename.lower() == q]
        if by_codename:
            return by_codename

        try:
            check_range(query)
        except RangeParseError:
            return []
        return [r for r in self.records() if nodesemver.satisfies(r.version, query, False)]
