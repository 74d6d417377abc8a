"""HTTP helpers for the remote data sources.

All network I/O is isolated here; the rest of the package works with
parsed data and files on disk.
"""

import logging
import os
from pathlib import Path
from typing import Any

import requests
from tenacity import retry, stop_after_attempt, wait_exponential

from . import __version__
from .errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = (10, 120)  # (connect, read)


def requests_session() -> requests.Session:
    """Create a configured requests session with auth and headers.

    Automatically picks up ``GITHUB_TOKEN`` or ``GH_TOKEN`` from env; the
    vulnerability index and release schedule are both served from GitHub.

    Returns:
        Configured ``requests.Session``.
    """
    s = requests.Session()
    s.headers.update(
        {
            "User-Agent": f"nodevuln/{__version__}",
            "Accept": "application/json",
        }
    )
    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    if token:
        s.headers["Authorization"] = f"Bearer {token}"
    return s


@retry(stop=stop_after_attempt(5), wait=wait_exponential(multiplier=1, min=1, max=30), reraise=True)
def get_json(session: requests.Session, url: str, timeout: Any = DEFAULT_HTTP_TIMEOUT) -> Any:
    """Fetch JSON from a URL with retry logic.

    Args:
        session: Requests session.
        url: URL to fetch.
        timeout: ``requests`` timeout value.

    Returns:
        Parsed JSON data.
    """
    r = session.get(url, timeout=timeout)
    r.raise_for_status()
    return r.json()


def probe_etag(session: requests.Session, url: str, timeout: Any = DEFAULT_HTTP_TIMEOUT) -> str | None:
    """Issue a HEAD request and return the resource's ETag.

    Args:
        session: Requests session.
        url: URL to probe.
        timeout: ``requests`` timeout value.

    Returns:
        The ``ETag`` header value, or ``None`` if the server sent none.

    Raises:
        FetchError: If the request fails or the status is not 200.
    """
    try:
        r = session.head(url, allow_redirects=True, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(f"HEAD {url} failed: {e}") from e
    if r.status_code != 200:
        raise FetchError(f"HEAD {url} returned HTTP {r.status_code}")
    return r.headers.get("ETag")


def stream_to_file(
    session: requests.Session,
    url: str,
    dest: Path,
    timeout: Any = DEFAULT_HTTP_TIMEOUT,
) -> None:
    """Stream a response body into ``dest``, replacing it atomically.

    The body goes to a temporary sibling file which is renamed over
    ``dest`` once complete, so ``dest`` is never left half-written.

    Args:
        session: Requests session.
        url: URL to download.
        dest: Target file.
        timeout: ``requests`` timeout value.

    Raises:
        FetchError: If the request fails, the status is not 200, or the
            body cannot be written to disk.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(dest.suffix + ".tmp")
    try:
        with session.get(url, stream=True, timeout=timeout) as r:
            if r.status_code != 200:
                raise FetchError(f"GET {url} returned HTTP {r.status_code}")
            with tmp.open("wb") as f:
                for chunk in r.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        f.write(chunk)
        tmp.replace(dest)
    except requests.RequestException as e:
        _discard(tmp)
        raise FetchError(f"GET {url} failed: {e}") from e
    except OSError as e:
        _discard(tmp)
        raise FetchError(f"Could not write {dest}: {e}") from e
    except FetchError:
        _discard(tmp)
        raise
    logger.debug("Wrote %s (%d bytes)", dest, dest.stat().st_size)


def _discard(path: Path) -> None:
    if path.is_file():
        path.unlink()
