from typing import Optional


class ClipsyncError(Exception):
    """Base class for clipsync failures."""


class EmptyValueError(ClipsyncError, ValueError):
    pass


class RemoteStoreError(ClipsyncError):
    """The remote store could not be reached or answered with a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body
