"""Custom exception hierarchy for picgallery."""

from __future__ import annotations


class GalleryError(Exception):
    """Base class for all custom errors raised by picgallery."""


class InvalidPathError(GalleryError):
    """Raised when a client path escapes the image root or targets the cache."""


class ImageNotFoundError(GalleryError):
    """Raised when the requested source image does not exist."""


class UnsupportedFormatError(GalleryError):
    """Raised when a source file cannot be decoded as a supported image."""


class CacheWriteError(GalleryError):
    """Raised when a generated thumbnail cannot be persisted.

    The rendered payload is attached as :attr:`payload` so callers may still
    answer the request with the in-memory bytes.
    """

    def __init__(self, message: str, *, payload: bytes | None = None) -> None:
        super().__init__(message)
        self.payload = payload


class LockTimeoutError(GalleryError):
    """Raised when a per-key generation lock cannot be acquired in time."""


class ImageReadError(GalleryError):
    """Raised when an existing source image cannot be read from disk."""
