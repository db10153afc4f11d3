"""Exception taxonomy for the access layer.

NotFoundError and WriteProtectionError reach callers. SourceUnavailableError is
raised only inside the read resolver, where the fallback to the legacy store
absorbs it. SystemConfigError propagates because it affects calendar
classification.
"""

from typing import Optional


class BizBridgeError(Exception):
    """Base class for every error raised by bizbridge."""


class NotFoundError(BizBridgeError, LookupError):
    """A record is absent from the converged read set."""

    def __init__(self, kind: str, record_id: object):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class WriteProtectionError(BizBridgeError):
    """The record carries no row position, so the legacy writer cannot address it."""

    def __init__(self, record_id: object, action: str = "update"):
        self.record_id = record_id
        self.action = action
        super().__init__(
            f"Refusing to {action} record {record_id}: it was read from the SQL store "
            "and has no rowIndex for the sheet writer"
        )


class SourceUnavailableError(BizBridgeError):
    """The primary (SQL) store failed to answer a read."""

    def __init__(self, source: str, cause: Optional[BaseException] = None):
        self.source = source
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Primary source '{source}' unavailable{detail}")


class SystemConfigError(BizBridgeError, ValueError):
    """Filter-rule configuration is missing or malformed."""


class MissingDependencyError(BizBridgeError):
    """A mandatory collaborator was not supplied or a writer is not configured."""
