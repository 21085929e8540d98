"""Directory scanner producing gallery snapshots."""

from __future__ import annotations

import itertools
import os
import threading
from pathlib import Path
from typing import List, Set, Tuple

from ..config import CACHE_DIR_NAME
from ..models.types import GallerySnapshot, ImageEntry, ScanWarning
from ..utils.logging import get_logger
from ..utils.pathutils import is_supported_image

LOGGER = get_logger(__name__)

_SEQUENCE = itertools.count(1)
_SEQUENCE_LOCK = threading.Lock()


def next_sequence() -> int:
    """Return a process-wide, strictly increasing snapshot number."""

    with _SEQUENCE_LOCK:
        return next(_SEQUENCE)


def gather_image_paths(
    root: Path, *, cache_dir_name: str = CACHE_DIR_NAME
) -> Tuple[List[str], List[ScanWarning]]:
    """Collect root-relative POSIX paths of every gallery image below *root*.

    Directory symlinks are followed, but a directory whose device/inode pair
    was already visited is skipped so link cycles terminate. Directories that
    cannot be listed produce a :class:`ScanWarning` instead of aborting the
    walk.
    """

    rels: List[str] = []
    warnings: List[ScanWarning] = []
    visited: Set[Tuple[int, int]] = set()

    def _relative(path: str) -> str:
        rel = os.path.relpath(path, root)
        return "." if rel == os.curdir else Path(rel).as_posix()

    def _on_error(exc: OSError) -> None:
        location = _relative(exc.filename) if exc.filename else "."
        warnings.append(ScanWarning(location, exc.strerror or str(exc)))

    root_str = os.fspath(root)
    for dirpath, dirnames, filenames in os.walk(root_str, onerror=_on_error, followlinks=True):
        try:
            stat = os.stat(dirpath)
        except OSError as exc:
            warnings.append(ScanWarning(_relative(dirpath), exc.strerror or str(exc)))
            dirnames[:] = []
            continue
        identity = (stat.st_dev, stat.st_ino)
        if identity in visited:
            warnings.append(ScanWarning(_relative(dirpath), "directory already visited through a symbolic link"))
            dirnames[:] = []
            continue
        visited.add(identity)

        if dirpath == root_str:
            reserved = cache_dir_name.casefold()
            dirnames[:] = [name for name in dirnames if name.casefold() != reserved]
        dirnames.sort()

        for filename in filenames:
            if not is_supported_image(filename):
                continue
            full_path = os.path.join(dirpath, filename)
            if not os.path.isfile(full_path):
                continue
            rels.append(_relative(full_path))

    return rels, warnings


def scan_gallery(root: Path, *, cache_dir_name: str = CACHE_DIR_NAME) -> GallerySnapshot:
    """Walk *root* and return an immutable :class:`GallerySnapshot`.

    Entries are sorted by relative path so slideshow order is stable within
    one snapshot. Warnings are logged and attached to the snapshot; the scan
    itself never fails because of a single bad subdirectory.
    """

    rels, warnings = gather_image_paths(root, cache_dir_name=cache_dir_name)
    for warning in warnings:
        LOGGER.warning("Skipped %s while scanning %s: %s", warning.path, root, warning.reason)

    entries = tuple(ImageEntry(path=rel, name=rel.rsplit("/", 1)[-1]) for rel in sorted(set(rels)))
    return GallerySnapshot(
        sequence=next_sequence(),
        entries=entries,
        warnings=tuple(warnings),
    )
