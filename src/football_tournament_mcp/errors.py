"""Error taxonomy for the local-to-remote migration."""

from typing import Optional


class MigrationError(Exception):
    """Base class for migration errors."""


class ReadError(MigrationError):
    """A local storage entry is malformed or unreadable."""

    def __init__(self, kind: str, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(f"Cannot read local collection '{kind}': {reason}")


class StorageUnavailableError(MigrationError):
    """The local storage backend itself cannot be reached."""


class InvalidRecordError(MigrationError):
    """A local record breaks one of the data model invariants."""


class UnsupportedRecordError(InvalidRecordError):
    """A local record has a shape the data model does not cover."""


class UnresolvedReferenceError(MigrationError):
    """A local identifier has no remote counterpart in the current run."""

    def __init__(self, kind: str, local_id: Optional[str]):
        self.kind = kind
        self.local_id = local_id
        super().__init__(f"Unresolved reference to {kind} '{local_id}'")


class WriteError(MigrationError):
    """The remote store rejected or failed to persist a record."""
