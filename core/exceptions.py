"""
Pipeline Exceptions

Every error raised inside the volume pipeline derives from VolumeError.
Connectors convert these into tier fallthrough; the aggregator converts
persistence errors into log lines. None of them reach API callers.
"""


class VolumeError(Exception):
    """Base exception for the volume pipeline."""


class InvalidCredential(VolumeError):
    """Missing, malformed or rejected (401/403) credential.

    Skips the remaining authenticated tiers; never retried.
    """


class TransportError(VolumeError):
    """Network failure, timeout or unexpected HTTP status from a venue."""

    def __init__(self, message: str, status: int = None) -> None:
        super().__init__(message)
        self.status = status


class MalformedResponse(TransportError):
    """Venue answered, but the payload is not the expected shape."""


class PersistenceError(VolumeError):
    """Credential or snapshot store read/write failure."""
