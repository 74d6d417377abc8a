"""Configuration models using Pydantic.

Settings can be supplied as a YAML file (``nodevuln.yaml``) and are
validated on load.  Every field has a default, so running without a
config file is the normal case.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CORE_INDEX_URL = "https://raw.githubusercontent.com/nodejs/security-wg/main/vuln/core/index.json"
SCHEDULE_URL = "https://raw.githubusercontent.com/nodejs/Release/main/schedule.json"
DIST_INDEX_URL = "https://nodejs.org/dist/index.json"

CONFIG_FILENAMES = ("nodevuln.yaml", "nodevuln.yml", ".nodevuln.yaml", ".nodevuln.yml")
CACHE_DIR_ENV = "NODEVULN_CACHE_DIR"


def default_cache_dir() -> Path:
    """Return ``$XDG_CACHE_HOME/nodevuln``, falling back to ``~/.cache/nodevuln``."""
    base = os.environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "nodevuln"


class Settings(BaseModel):
    """Validated runtime settings.

    Example YAML::

        cache_dir: ~/.cache/nodevuln
        connect_timeout: 10
        read_timeout: 120
        index_url: https://raw.githubusercontent.com/nodejs/security-wg/main/vuln/core/index.json

    Attributes:
        index_url: Location of the core vulnerability index.
        schedule_url: Location of the Release WG ``schedule.json``.
        dist_url: Location of the nodejs.org release listing.
        cache_dir: Directory holding the ETag record and index snapshot.
        connect_timeout: HTTP connect timeout in seconds.
        read_timeout: HTTP read timeout in seconds.
    """

    index_url: str = CORE_INDEX_URL
    schedule_url: str = SCHEDULE_URL
    dist_url: str = DIST_INDEX_URL
    cache_dir: Path = Field(default_factory=default_cache_dir)
    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=120.0, gt=0)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _expand_cache_dir(cls, v: Any) -> Any:
        """Expand ``~`` in user-supplied cache paths."""
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v

    @field_validator("index_url", "schedule_url", "dist_url")
    @classmethod
    def _require_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"expected an http(s) URL, got {v!r}")
        return v

    @property
    def timeout(self) -> tuple[float, float]:
        """``(connect, read)`` tuple as accepted by ``requests``."""
        return (self.connect_timeout, self.read_timeout)


def find_config() -> Path | None:
    """Find a config file in the working directory.

    Returns:
        Path of the first existing candidate, or ``None``.
    """
    for name in CONFIG_FILENAMES:
        p = Path(name)
        if p.exists():
            return p
    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a YAML file and the environment.

    ``NODEVULN_CACHE_DIR`` overrides ``cache_dir`` from the file.

    Args:
        path: Config file.  When ``None``, ``find_config()`` is consulted.

    Returns:
        Validated ``Settings`` instance.

    Raises:
        FileNotFoundError: if an explicit ``path`` doesn't exist.
        pydantic.ValidationError: if content fails validation.
    """
    if path is None:
        path = find_config()

    raw: dict[str, Any] = {}
    if path is not None:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            raw = loaded

    env_cache = os.environ.get(CACHE_DIR_ENV)
    if env_cache:
        raw["cache_dir"] = env_cache

    return Settings.model_validate(raw)
