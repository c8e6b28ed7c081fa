# ==============================================================================
# Domain Errors
# ==============================================================================
"""
Exception hierarchy shared by the ingestion, session and aggregation layers.

Caller mistakes raise InvalidRequestError (mapped to HTTP 400 at the API
boundary); anything the backing store does wrong raises StoreError (HTTP 500).
Nothing in the core catches these - they propagate to the boundary as-is.
"""


class SitePulseError(Exception):
    """Base class for all SitePulse errors."""

    pass


class InvalidRequestError(SitePulseError):
    """Missing or malformed caller input."""

    pass


class IngestionError(InvalidRequestError):
    """
    A batch was rejected during validation.

    Attributes:
        event_index: Position of the offending event in the batch, or None
                     when the batch envelope itself is malformed.
    """

    def __init__(self, message: str, event_index: int | None = None):
        super().__init__(message)
        self.event_index = event_index


class StoreError(SitePulseError):
    """The event or session store failed to read or write."""

    pass
