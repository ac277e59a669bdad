"""Exception types for the sales sync pipeline."""
from typing import Optional


class SyncError(Exception):
    """Base class for pipeline errors."""


class CredentialError(SyncError):
    """The integration account has no usable credential (batch-fatal)."""


class OrderSearchError(SyncError):
    """The order-search call failed (batch-fatal)."""


class PersistenceError(SyncError):
    """The bulk upsert failed (batch-fatal)."""


class OrderEnrichmentError(SyncError):
    """A single order could not be enriched; the batch skips it."""

    def __init__(self, message: str, order_id: Optional[str] = None):
        super().__init__(message)
        self.order_id = order_id


class UpstreamError(SyncError):
    """
    One upstream call failed.

    Returned as a value by the client rather than raised, so section
    enrichers can turn it into a sync_errors entry.
    """

    def __init__(self, endpoint: str, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status
        self.message = message

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.endpoint} -> HTTP {self.status}: {self.message}"
        return f"{self.endpoint}: {self.message}"
