"""Persistent cache for the core vulnerability index.

Two files live in the cache directory: ``.etag`` holds the freshness token
of the last download and ``core.json`` holds the index body.  The token is
only trusted when the snapshot it describes is also on disk, since the two
files are not written atomically together.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import requests

from .config import Settings
from .downloaders import probe_etag, requests_session, stream_to_file
from .errors import MalformedSnapshotError
from .models import VulnerabilityIndex, load_snapshot

logger = logging.getLogger(__name__)

ETAG_FILENAME = ".etag"
SNAPSHOT_FILENAME = "core.json"


@dataclass
class CacheState:
    """Freshness token and snapshot location, persisted across runs.

    Attributes:
        token_path: File holding the last seen ETag.
        snapshot_path: File holding the last downloaded index.
        token: In-memory copy of the token, ``None`` when not loaded.
    """

    token_path: Path
    snapshot_path: Path
    token: str | None = None

    @classmethod
    def load(cls, cache_dir: Path, preload: bool = True) -> "CacheState":
        """Create the state for ``cache_dir``.

        Args:
            cache_dir: Directory holding the cache files.
            preload: Read the persisted token.  Refresh mode passes
                ``False`` so the next ``get()`` always downloads.

        Returns:
            A ``CacheState``.
        """
        state = cls(token_path=cache_dir / ETAG_FILENAME, snapshot_path=cache_dir / SNAPSHOT_FILENAME)
        if preload and state.token_path.exists():
            logger.debug("Loading local ETag from %s", state.token_path)
            state.token = state.token_path.read_text(encoding="utf-8").strip() or None
        return state

    def snapshot_exists(self) -> bool:
        return self.snapshot_path.is_file()

    def is_fresh(self, remote_token: str | None) -> bool:
        """Return ``True`` when the snapshot can be reused for ``remote_token``."""
        return (
            self.token is not None
            and remote_token is not None
            and self.token == remote_token
            and self.snapshot_exists()
        )

    def update_token(self, token: str | None) -> None:
        """Set and persist the token.  ``None`` removes the token file."""
        self.token = token
        if token is None:
            self.token_path.unlink(missing_ok=True)
            return
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(token, encoding="utf-8")

    def read_snapshot(self) -> VulnerabilityIndex:
        """Deserialize the snapshot from disk.

        Raises:
            MalformedSnapshotError: If the snapshot is missing or corrupt.
        """
        return load_snapshot(self.snapshot_path, token=self.token)


class IndexCache:
    """Serve the vulnerability index, re-downloading only when it changed.

    Each ``get()`` probes the remote index with a HEAD request and compares
    its ETag with the cached one.  The body is downloaded only when the
    tokens differ or the snapshot is missing.

    Attributes:
        state: Cache state this instance owns and writes.
        settings: URLs, timeouts and cache location.
        session: HTTP session used for the probe and the download.
    """

    def __init__(
        self,
        state: CacheState,
        settings: Settings | None = None,
        session: requests.Session | None = None,
    ):
        self.state = state
        self.settings = settings or Settings()
        self.session = session or requests_session()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: requests.Session | None = None,
        refresh: bool = False,
    ) -> "IndexCache":
        """Build a cache over ``settings.cache_dir``; ``refresh`` skips the token preload."""
        state = CacheState.load(settings.cache_dir, preload=not refresh)
        return cls(state, settings=settings, session=session)

    def get(self) -> VulnerabilityIndex:
        """Return the current vulnerability index.

        A freshly downloaded body that fails to parse also clears the token,
        so the next call downloads again.

        Raises:
            FetchError: If the probe or download fails.
            MalformedSnapshotError: If the stored snapshot cannot be parsed.
        """
        url = self.settings.index_url
        remote_token = probe_etag(self.session, url, timeout=self.settings.timeout)

        if self.state.is_fresh(remote_token):
            logger.debug("No updates from upstream. Using cached %s", self.state.snapshot_path)
            return self.state.read_snapshot()

        self.refresh(remote_token)
        try:
            return self.state.read_snapshot()
        except MalformedSnapshotError:
            self.state.update_token(None)
            raise

    def refresh(self, remote_token: str | None) -> None:
        """Persist ``remote_token`` and download the index body.

        The token is written first.  If the download fails it is cleared
        again, so a later run does not pair it with an old snapshot.

        Raises:
            FetchError: If the download fails or the body cannot be written.
        """
        url = self.settings.index_url
        self.state.update_token(remote_token)
        logger.info("Downloading vulnerability index from %s", url)
        try:
            stream_to_file(self.session, url, self.state.snapshot_path, timeout=self.settings.timeout)
        except Exception:
            self.state.update_token(None)
            raise
