"""Data models shared across picgallery."""

from .types import ChangeEvent, GallerySnapshot, ImageEntry, ImagePayload, ScanWarning, diff_snapshots

__all__ = [
    "ChangeEvent",
    "GallerySnapshot",
    "ImageEntry",
    "ImagePayload",
    "ScanWarning",
    "diff_snapshots",
]
