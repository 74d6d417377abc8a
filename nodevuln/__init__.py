"""nodevuln — is this Node.js version safe to run?

Checks a Node.js version against the release schedule (end-of-life and
supported lines) and the Node.js security working group's core
vulnerability index.
"""

__version__ = "0.1.0"

from .api import (  # noqa: E402
    check,
    is_node_eol,
    is_node_supported_major,
    is_node_vulnerable,
    supported_major_versions,
)
from .errors import (  # noqa: E402
    AmbiguousVersionError,
    FetchError,
    MalformedSnapshotError,
    NodeVulnError,
    ParseError,
    RangeParseError,
    VersionLookupError,
)

__all__ = [
    "AmbiguousVersionError",
    "FetchError",
    "MalformedSnapshotError",
    "NodeVulnError",
    "ParseError",
    "RangeParseError",
    "VersionLookupError",
    "check",
    "is_node_eol",
    "is_node_supported_major",
    "is_node_vulnerable",
    "supported_major_versions",
]
