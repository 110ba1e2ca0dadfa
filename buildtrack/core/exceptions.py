"""
Service-layer exceptions.

Routers translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""

from typing import Any, Optional


class BuildTrackError(Exception):
    """Base class for all BuildTrack service errors."""


class RecordNotFoundError(BuildTrackError, LookupError):
    """A record with the requested id does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found")


class ValidationFailedError(BuildTrackError, ValueError):
    """Input passed schema validation but violates a business rule."""


class StorageError(BuildTrackError):
    """The object store rejected an upload or delete."""


class StorageUnavailableError(StorageError):
    """No object store is configured for this deployment."""


class BlueprintAnalysisError(BuildTrackError):
    """The vision model could not be reached or returned an unusable answer."""

    def __init__(self, message: str, status_code: int = 502, details: Optional[Any] = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)
