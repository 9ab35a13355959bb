"""
Exception hierarchy for the publish pipeline.

Build and listing errors abort a run. Upload errors are raised by the
store layer and collected per object by the executor.
"""


class CdnSyncError(Exception):
    """Base class for all cdnsync errors."""


class ConfigError(CdnSyncError):
    """Invalid or incomplete configuration (bad environment name, unknown key)."""


class BuildError(CdnSyncError):
    """The static-site generator failed or produced no output."""


class ListingError(CdnSyncError):
    """The remote object listing could not be retrieved.

    ``transient`` is True when the same request may succeed on retry.
    """

    def __init__(self, message, transient=False):
        super().__init__(message)
        self.transient = transient


class UploadError(CdnSyncError):
    """A single object upload failed.

    Args:
        key: Asset key that failed
        reason: Human-readable failure reason
        transient: True if the failure may succeed on retry
    """

    def __init__(self, key, reason, transient=False):
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason
        self.transient = transient


class InvalidTransitionError(CdnSyncError):
    """Raised when a pipeline state transition is not allowed."""
