"""
Exceptions raised by the sync pipeline.

Failures are isolated to the smallest unit they occur in: an entry, then a
channel, then the run. Only ConfigMissing aborts a run outright;
SyncCancelled propagates because the caller asked for it.
"""

from typing import Optional


class TubeSyncError(Exception):
    """Base class for all sync errors."""


class ConfigMissing(TubeSyncError):
    """No usable configuration for the run."""


class FeedError(TubeSyncError):
    """A channel feed could not be retrieved or understood."""

    def __init__(self, channel_id: str, message: str):
        self.channel_id = channel_id
        super().__init__(f"{channel_id}: {message}")


class NetworkError(FeedError):
    """Transport failure or non-success HTTP status."""

    def __init__(self, channel_id: str, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(channel_id, message)


class ParseError(FeedError):
    """Feed document is malformed or lacks a title."""


class AcquisitionError(TubeSyncError):
    """The download tool could not be started."""


class SyncCancelled(TubeSyncError):
    """The run was cancelled by its caller."""


class SyncAlreadyRunning(TubeSyncError):
    """A sync run is already in progress."""
