"""Programmatic entry points.

Each call builds its own cache state and schedule, so nothing is shared
between calls except the files in the cache directory.
"""

from datetime import datetime

import requests

from .cache import IndexCache
from .classifier import is_eol, is_supported_major
from .config import Settings, load_settings
from .downloaders import requests_session
from .schedule import ReleaseSchedule
from .verdict import Verdict, evaluate, is_vulnerable


def _setup(settings: Settings | None, session: requests.Session | None) -> tuple[Settings, requests.Session]:
    return settings or load_settings(), session or requests_session()


def check(
    version: str,
    *,
    settings: Settings | None = None,
    session: requests.Session | None = None,
    refresh: bool = False,
    now: datetime | None = None,
) -> Verdict:
    """Full check: end-of-life, support, then known vulnerabilities.

    Args:
        version: Node.js version, e.g. ``v20.11.1``.
        settings: Settings; loaded from ``nodevuln.yaml``/env when omitted.
        session: HTTP session to reuse.
        refresh: Ignore the cached ETag and download the index again.
        now: Reference time for the schedule checks.

    Returns:
        ``Verdict``.
    """
    settings, session = _setup(settings, session)
    schedule = ReleaseSchedule(settings, session)
    cache = IndexCache.from_settings(settings, session=session, refresh=refresh)
    return evaluate(version, schedule, cache, now)


def is_node_vulnerable(
    version: str,
    *,
    settings: Settings | None = None,
    session: requests.Session | None = None,
    refresh: bool = False,
) -> bool:
    """Return ``True`` if the index lists a vulnerability affecting ``version``.

    Support status is not considered here; see ``is_node_eol``.
    """
    settings, session = _setup(settings, session)
    cache = IndexCache.from_settings(settings, session=session, refresh=refresh)
    return is_vulnerable(version, cache)


def is_node_eol(
    version: str,
    *,
    settings: Settings | None = None,
    session: requests.Session | None = None,
    now: datetime | None = None,
) -> bool:
    """Return ``True`` if ``version`` is past end-of-life.

    Raises:
        VersionLookupError: For unknown versions (``"abcd"``, ``"99.0.0"``).
        AmbiguousVersionError: For queries matching several releases
            (``"18"``, ``"lts"``).
    """
    settings, session = _setup(settings, session)
    return is_eol(version, ReleaseSchedule(settings, session), now)


def is_node_supported_major(
    version: str,
    *,
    settings: Settings | None = None,
    session: requests.Session | None = None,
    now: datetime | None = None,
) -> bool:
    """Return ``True`` if the major of ``version`` is a supported release line.

    Raises:
        ParseError: If ``version`` is not a valid semantic version.
    """
    settings, session = _setup(settings, session)
    return is_supported_major(version, ReleaseSchedule(settings, session), now)


def supported_major_versions(
    *,
    settings: Settings | None = None,
    session: requests.Session | None = None,
    now: datetime | None = None,
) -> list[int]:
    """Majors of every currently supported release line, ascending."""
    settings, session = _setup(settings, session)
    return sorted(ReleaseSchedule(settings, session).supported_majors(now))
