"""Data models used by picgallery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(slots=True, frozen=True)
class ImageEntry:
    """A single gallery image as exposed to clients."""

    path: str
    """Root-relative path using forward slashes."""

    name: str
    """Final path segment shown as the caption."""

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "name": self.name}


@dataclass(slots=True, frozen=True)
class ScanWarning:
    """Non-fatal problem encountered while walking the image root."""

    path: str
    reason: str


@dataclass(slots=True, frozen=True)
class GallerySnapshot:
    """Immutable listing produced by one scan pass."""

    sequence: int
    entries: Tuple[ImageEntry, ...] = ()
    warnings: Tuple[ScanWarning, ...] = ()

    @property
    def count(self) -> int:
        return len(self.entries)

    def paths(self) -> frozenset[str]:
        return frozenset(entry.path for entry in self.entries)

    def to_payload(self) -> Dict[str, object]:
        """Return the JSON document served by the listing endpoint."""

        return {
            "count": self.count,
            "images": [entry.to_dict() for entry in self.entries],
        }


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    """Difference between two consecutive snapshots."""

    sequence: int = 0
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed

    def to_payload(self) -> Dict[str, object]:
        return {
            "sequence": self.sequence,
            "added": list(self.added),
            "removed": list(self.removed),
        }


@dataclass(slots=True, frozen=True)
class ImagePayload:
    """Encoded image bytes ready to be sent to a client."""

    data: bytes
    mime: str
    etag: str = field(default="")


def diff_snapshots(previous: GallerySnapshot, current: GallerySnapshot) -> ChangeEvent:
    """Return the :class:`ChangeEvent` turning *previous* into *current*."""

    before = previous.paths()
    after = current.paths()
    added: List[str] = sorted(after - before)
    removed: List[str] = sorted(before - after)
    return ChangeEvent(sequence=current.sequence, added=tuple(added), removed=tuple(removed))
