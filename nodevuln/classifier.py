"""Support classification of a Node.js version.

Decides whether a version belongs to a currently supported release line
and whether its line is past end-of-life.  The two answers are computed
independently; ``Classification.status`` ranks end-of-life first.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone

from .errors import AmbiguousVersionError, VersionLookupError
from .schedule import ReleaseRecord, ReleaseScheduleProvider
from .versions import VersionLike, parse_version


class SupportStatus(str, enum.Enum):
    SUPPORTED = "supported"
    UNSUPPORTED_NOT_EOL = "unsupported"
    END_OF_LIFE = "end-of-life"


@dataclass(frozen=True)
class Classification:
    """Result of ``classify``.

    Attributes:
        status: Overall status, end-of-life taking priority.
        detail: Human-readable explanation.
        record: The release record the version resolved to.
        supported: Whether the record's major is in the supported set.
        end_of_life: Whether the record's line is past its end date.
    """

    status: SupportStatus
    detail: str
    record: ReleaseRecord
    supported: bool
    end_of_life: bool


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def lookup_record(query: str, schedule: ReleaseScheduleProvider, now: datetime | None = None) -> ReleaseRecord:
    """Resolve ``query`` to exactly one release record.

    Raises:
        VersionLookupError: If nothing matches.
        AmbiguousVersionError: If more than one record matches, e.g. for
            ``18`` or ``lts``.
    """
    records = schedule.lookup(query, _now(now))
    if not records:
        raise VersionLookupError(f"Could not fetch version information for {query}")
    if len(records) != 1:
        raise AmbiguousVersionError(f"Did not get exactly one version record for {query} (got {len(records)})")
    return records[0]


def record_is_eol(record: ReleaseRecord, now: datetime | None = None) -> bool:
    """End-of-life check for a single record.

    Releases whose line has no published end date are old enough to
    predate the schedule and count as end-of-life.  Support runs through
    the end date: ``now`` equal to ``end`` is not yet end-of-life.
    """
    if record.end is None:
        return True
    return _now(now) > record.end


def is_eol(version: VersionLike, schedule: ReleaseScheduleProvider, now: datetime | None = None) -> bool:
    """Return ``True`` if ``version`` is past end-of-life.

    ``version`` is passed to the schedule as-is, so an alias or a bare
    major raises ``AmbiguousVersionError`` rather than being guessed.
    """
    return record_is_eol(lookup_record(str(version), schedule, now), now)


def is_supported_major(version: VersionLike, schedule: ReleaseScheduleProvider, now: datetime | None = None) -> bool:
    """Return ``True`` if the major of ``version`` is a supported release line.

    Raises:
        ParseError: If ``version`` is not a valid semantic version.
    """
    v = parse_version(version)
    return v.major in schedule.supported_majors(_now(now))


def classify(version: VersionLike, schedule: ReleaseScheduleProvider, now: datetime | None = None) -> Classification:
    """Classify ``version`` against the release schedule.

    Args:
        version: Concrete version (``v18.5.0``).
        schedule: Release schedule provider.
        now: Reference time, defaults to the current UTC time.

    Returns:
        ``Classification``.

    Raises:
        ParseError: If ``version`` is not a valid semantic version.
        VersionLookupError: If the schedule has no record for ``version``.
        AmbiguousVersionError: If the schedule has several.
    """
    now = _now(now)
    v = parse_version(version)
    majors = schedule.supported_majors(now)
    record = lookup_record(str(v), schedule, now)
    supported = record.major in majors
    eol = record_is_eol(record, now)

    if eol:
        if record.end is None:
            detail = f"{version} belongs to {record.line}, which has no published end-of-life date"
        else:
            detail = f"{version} reached end-of-life on {record.end.date().isoformat()}"
        status = SupportStatus.END_OF_LIFE
    elif supported:
        detail = f"{version} is in a supported release line ({record.phase(now)})"
        status = SupportStatus.SUPPORTED
    else:
        detail = f"{version} is not in an actively supported release line"
        status = SupportStatus.UNSUPPORTED_NOT_EOL

    return Classification(status=status, detail=detail, record=record, supported=supported, end_of_life=eol)
