"""Vulnerability index models and snapshot deserialization."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ItemsView

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from .errors import MalformedSnapshotError


class VulnerabilityEntry(BaseModel):
    """One row of the Node.js core vulnerability index.

    Example upstream record::

        "130": {
          "cve": ["CVE-2023-30581"],
          "vulnerable": "^16.0.0 || ^18.0.0 || ^20.0.0",
          "patched": "^16.20.1 || ^18.16.1 || ^20.3.1",
          "ref": "https://nodejs.org/en/blog/vulnerability/june-2023-security-releases/",
          "overview": "The use of __proto__ in process.mainModule...",
          "affectedEnvironments": ["all"],
          "severity": "high"
        }

    Attributes:
        cve: CVE identifiers; a bare string is wrapped in a list.
        overview: Human summary.
        vulnerable: Range of affected versions.  ``None`` matches nothing.
        patched: Range of fixed versions.  ``None`` means no fix exists.
        ref: Advisory URL.
        severity: Upstream severity label.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    cve: list[str] = Field(default_factory=list)
    overview: str = ""
    vulnerable: str | None = None
    patched: str | None = None
    ref: str | None = None
    severity: str | None = None

    @field_validator("cve", mode="before")
    @classmethod
    def _wrap_single_cve(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    def identifier(self, key: str = "") -> str:
        """Human identifier: the joined CVE ids, else the index key."""
        if self.cve:
            return ", ".join(self.cve)
        return key


_ENTRIES_ADAPTER = TypeAdapter(dict[str, VulnerabilityEntry])


@dataclass(frozen=True)
class VulnerabilityIndex:
    """The full index as currently known.

    Attributes:
        entries: Entry key to entry, in source order.
        token: Freshness token (ETag) the snapshot was stored under.
    """

    entries: dict[str, VulnerabilityEntry] = field(default_factory=dict)
    token: str | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def items(self) -> ItemsView[str, VulnerabilityEntry]:
        return self.entries.items()


def parse_index(raw: Any, token: str | None = None) -> VulnerabilityIndex:
    """Validate decoded index JSON.

    Args:
        raw: Decoded JSON; must be an object of key to entry.
        token: Freshness token to attach.

    Returns:
        ``VulnerabilityIndex`` with entries in source order.

    Raises:
        MalformedSnapshotError: If the structure does not validate.
    """
    if not isinstance(raw, dict):
        raise MalformedSnapshotError(f"Expected a JSON object, got {type(raw).__name__}")
    try:
        entries = _ENTRIES_ADAPTER.validate_python(raw)
    except ValidationError as e:
        raise MalformedSnapshotError(f"Invalid vulnerability index: {e.error_count()} error(s)\n{e}") from e
    return VulnerabilityIndex(entries=entries, token=token)


def load_snapshot(path: Path, token: str | None = None) -> VulnerabilityIndex:
    """Read and deserialize a persisted index snapshot.

    Args:
        path: Snapshot file.
        token: Freshness token to attach.

    Raises:
        MalformedSnapshotError: If the file is missing, not JSON, or fails validation.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise MalformedSnapshotError(f"Snapshot {path} does not exist") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedSnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e
    return parse_index(raw, token=token)
