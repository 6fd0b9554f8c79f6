"""Exception types raised by the bundle downloader."""

from __future__ import annotations


class BundleDownloaderError(Exception):
    """Base class for all bundle downloader failures."""


class TransportError(BundleDownloaderError):
    """Raised when a fetch returns a non-success status or the transport fails."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class MetadataDecodeError(BundleDownloaderError, ValueError):
    """Raised when a metadata listing cannot be deserialized."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        self.message = message
        super().__init__(message)


class BundleNotFoundError(BundleDownloaderError, KeyError):
    """Raised when metadata is requested for a bundle no source has described."""

    def __init__(self, bundle_id: str, message: str | None = None):
        self.bundle_id = bundle_id
        self.message = message or f"Unknown bundle: {bundle_id}"
        super().__init__(self.message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class PayloadReleasedError(BundleDownloaderError):
    """Raised when a released payload handle is read."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Payload for {filename} has been released")
