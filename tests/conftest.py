"""Shared fixtures for the nodevuln test suite."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from nodevuln.config import Settings
from nodevuln.schedule import ReleaseRecord, build_records

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)

SCHEDULE_JSON: dict[str, dict[str, Any]] = {
    "v0.12": {"start": "2015-02-06", "end": "2016-12-31"},
    "v4": {"start": "2015-09-08", "lts": "2015-10-12", "maintenance": "2017-04-01", "end": "2018-04-30", "codename": "Argon"},
    "v16": {"start": "2021-04-20", "lts": "2021-10-26", "maintenance": "2022-10-18", "end": "2023-09-11", "codename": "Gallium"},
    "v18": {"start": "2022-04-19", "lts": "2022-10-25", "maintenance": "2023-10-18", "end": "2025-04-30", "codename": "Hydrogen"},
    "v20": {"start": "2023-04-18", "lts": "2023-10-24", "maintenance": "2024-10-22", "end": "2026-04-30", "codename": "Iron"},
    "v21": {"start": "2023-10-17", "maintenance": "2024-04-01", "end": "2024-06-01"},
    "v22": {"start": "2024-04-24", "lts": "2024-10-29", "maintenance": "2025-10-21", "end": "2027-04-30"},
}

DIST_JSON: list[dict[str, Any]] = [
    {"version": "v22.2.0", "date": "2024-05-15", "lts": False, "security": False},
    {"version": "v21.7.3", "date": "2024-04-10", "lts": False, "security": True},
    {"version": "v20.14.0", "date": "2024-05-28", "lts": "Iron", "security": False},
    {"version": "v20.13.1", "date": "2024-05-09", "lts": "Iron", "security": False},
    {"version": "v18.20.3", "date": "2024-05-21", "lts": "Hydrogen", "security": False},
    {"version": "v18.5.2", "date": "2022-07-15", "lts": False, "security": False},
    {"version": "v18.5.0", "date": "2022-07-06", "lts": False, "security": True},
    {"version": "v16.20.2", "date": "2023-08-08", "lts": "Gallium", "security": True},
    {"version": "v4.0.0", "date": "2015-09-08", "lts": False, "security": False},
    {"version": "v0.12.18", "date": "2017-02-22", "lts": False, "security": False},
    {"version": "v0.10.48", "date": "2016-10-18", "lts": False, "security": False},
]

INDEX_JSON: dict[str, dict[str, Any]] = {
    "1": {
        "cve": ["CVE-2022-32212"],
        "vulnerable": ">=18.0.0 <18.6.0",
        "patched": ">=18.5.1",
        "ref": "https://nodejs.org/en/blog/vulnerability/july-2022-security-releases/",
        "overview": "DNS rebinding in --inspect via invalid IP addresses",
    },
    "2": {
        "cve": ["CVE-2024-22020"],
        "vulnerable": "^18.0.0 || ^20.0.0 || ^22.0.0",
        "patched": "^18.20.4 || ^20.15.1 || ^22.4.1",
        "overview": "Bypass network import restriction via data URL",
        "severity": "medium",
    },
    "3": {
        "cve": [],
        "vulnerable": "<16.0.0",
        "patched": ">=16.0.0",
        "overview": "Legacy issue without a CVE",
    },
}


class FakeSchedule:
    """In-memory release schedule provider."""

    def __init__(self, records: list[ReleaseRecord], majors: set[int]):
        self._records = records
        self._majors = majors
        self.lookups: list[str] = []

    def supported_majors(self, now=None) -> set[int]:
        return set(self._majors)

    def lookup(self, query: str, now=None) -> list[ReleaseRecord]:
        self.lookups.append(query)
        q = query.lstrip("v")
        return [r for r in self._records if r.version == q]


@pytest.fixture
def records() -> list[ReleaseRecord]:
    return build_records(DIST_JSON, SCHEDULE_JSON)


@pytest.fixture
def fake_schedule(records: list[ReleaseRecord]) -> FakeSchedule:
    return FakeSchedule(records, majors={18, 20, 22})


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(cache_dir=tmp_path / "cache")


def make_head_response(etag: str | None, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.headers = {"ETag": etag} if etag is not None else {}
    return resp


def make_stream_response(body: Any, status: int = 200) -> MagicMock:
    raw = body if isinstance(body, bytes) else json.dumps(body).encode()
    resp = MagicMock()
    resp.status_code = status
    resp.iter_content.return_value = [raw[: len(raw) // 2], raw[len(raw) // 2 :]]
    resp.__enter__ = lambda s: s
    resp.__exit__ = MagicMock(return_value=False)
    return resp


def make_index_session(etag: str | None, body: Any = None, get_status: int = 200) -> MagicMock:
    """Session whose HEAD returns ``etag`` and whose GET streams ``body``."""
    session = MagicMock()
    session.head.return_value = make_head_response(etag)
    session.get.return_value = make_stream_response(INDEX_JSON if body is None else body, status=get_status)
    return session
