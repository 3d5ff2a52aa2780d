"""Domain errors raised by the metadata services.

Each error carries a machine-readable ``kind`` and the HTTP status the API
layer answers with, so handlers never need to inspect messages.
"""

from __future__ import annotations


class MetadataError(RuntimeError):
    """Base class for failures surfaced to API callers."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(MetadataError):
    """Token, session or metadata record does not exist."""

    kind = "not_found"
    status_code = 404


class ForbiddenError(MetadataError):
    """Ownership or admin allow-list check failed."""

    kind = "forbidden"
    status_code = 403


class ConflictError(MetadataError):
    """The resource already exists."""

    kind = "conflict"
    status_code = 409


class MetadataValidationError(MetadataError):
    """Input was rejected before touching storage."""

    kind = "validation"
    status_code = 400


class UpstreamUnavailableError(MetadataError):
    """A chain RPC endpoint or asset store could not be reached."""

    kind = "upstream_unavailable"
    status_code = 503


class OwnershipLookupError(UpstreamUnavailableError):
    """The on-chain owner could not be determined."""


class AssetStorageError(UpstreamUnavailableError):
    """Neither remote pinning nor the local fallback could store an asset."""


class PersistenceError(MetadataError):
    """A write to the relational store failed after side effects happened."""

    kind = "persistence"
    status_code = 500
