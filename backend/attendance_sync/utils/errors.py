"""Error taxonomy for attendance synchronization."""
from typing import Dict, List, Optional


class SyncError(Exception):
    """Base class for errors that fail a single synced record."""

    kind = 'sync'
    retryable = False


class ShapeError(SyncError):
    """Malformed or missing field on a record."""

    kind = 'shape'


class ReferentialError(SyncError):
    """Dangling or mismatched student/faculty/section reference."""

    kind = 'referential'


class TemporalError(SyncError):
    """Record timestamp outside the accepted window."""

    kind = 'temporal'


class StoreError(SyncError):
    """Failure surfaced by the persistence layer."""

    kind = 'store'
    retryable = True


class CommitTimeoutError(StoreError):
    """A record commit ran past its deadline and was rolled back."""


class BatchShapeError(Exception):
    """The sync request itself is malformed; nothing was processed."""

    def __init__(self, details: List[Dict[str, Optional[str]]]):
        self.details = details
        super().__init__('; '.join(d['message'] for d in details))


class StoreUnavailableError(Exception):
    """The store cannot be reached before any record work begins."""


class ResourceNotFoundError(Exception):
    """A management request referenced a missing resource (404)."""


class ResourceConflictError(Exception):
    """A management request clashes with existing data (409)."""
