"""Exception hierarchy for nodevuln.

Nothing in the library catches these; the CLI is the only place that turns
them into an exit status.
"""


class NodeVulnError(Exception):
    """Base class for all nodevuln errors."""


class ParseError(NodeVulnError, ValueError):
    """A version string is not a valid semantic version."""


class RangeParseError(NodeVulnError, ValueError):
    """A vulnerability entry carries a malformed range expression."""


class VersionLookupError(NodeVulnError, LookupError):
    """The release schedule has no record for the queried version."""


class AmbiguousVersionError(NodeVulnError, LookupError):
    """The release schedule returned more than one record for a single-version query."""


class FetchError(NodeVulnError):
    """A metadata probe or download against a remote source failed."""


class MalformedSnapshotError(NodeVulnError):
    """The persisted vulnerability index snapshot could not be deserialized."""
