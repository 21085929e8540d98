"""Persistent storage for generated thumbnails."""

from __future__ import annotations

import os
import stat as stat_module
from pathlib import Path
from typing import Optional

from ..config import CACHE_DIR_NAME, LOCK_TIMEOUT_SEC, THUMB_JPEG_QUALITY, THUMB_MIME, THUMB_SIZE
from ..errors import CacheWriteError, ImageNotFoundError, ImageReadError
from ..io.images import render_thumbnail
from ..models.types import ImagePayload
from ..utils.fileio import atomic_write_bytes, copy_mtime
from ..utils.hashutils import bytes_xxh3
from ..utils.logging import get_logger
from ..utils.pathutils import cache_file_name, ensure_cache_dir, is_supported_image, resolve_relative
from .lock import KeyLockTable

LOGGER = get_logger(__name__)


class ThumbnailStore:
    """Lazily generated thumbnails kept in ``<root>/.thumbnails``.

    A cache file is valid while its modification time is not older than the
    source image. Generation for one image is serialised through a per-key
    lock and every caller re-checks the cache once it owns the lock, so a
    burst of requests for a cold image decodes and writes it exactly once.
    """

    def __init__(
        self,
        root: Path,
        *,
        cache_dir_name: str = CACHE_DIR_NAME,
        size: int = THUMB_SIZE,
        quality: int = THUMB_JPEG_QUALITY,
        lock_timeout: Optional[float] = LOCK_TIMEOUT_SEC,
    ) -> None:
        self.root = root
        self.cache_dir_name = cache_dir_name
        self.cache_dir = ensure_cache_dir(root, cache_dir_name)
        self.size = size
        self.quality = quality
        self.lock_timeout = lock_timeout
        self._locks = KeyLockTable()

    @property
    def pending_keys(self) -> int:
        """Number of images whose generation lock is currently in use."""

        return len(self._locks)

    def source_path(self, rel: str) -> Path:
        return resolve_relative(self.root, rel, cache_dir_name=self.cache_dir_name)

    def cache_path(self, rel: str) -> Path:
        """Return the cache artifact location for the normalised *rel*."""

        return self.cache_dir / cache_file_name(rel)

    def get_thumbnail(self, rel: str) -> ImagePayload:
        """Return thumbnail bytes for *rel*, generating them when needed."""

        source = self.source_path(rel)
        key = source.relative_to(self.root).as_posix()
        cache_path = self.cache_path(key)

        source_stat = self._stat_source(source, key)
        cached = self._read_valid(cache_path, source_stat)
        if cached is not None:
            return self._payload(cached)

        with self._locks.hold(key, timeout=self.lock_timeout):
            # Another caller may have finished the work while we waited, and
            # the source may have changed again in the meantime.
            source_stat = self._stat_source(source, key)
            cached = self._read_valid(cache_path, source_stat)
            if cached is not None:
                return self._payload(cached)
            data = self._generate(source, key, cache_path, source_stat)
        return self._payload(data)

    def _stat_source(self, source: Path, key: str) -> os.stat_result:
        if not is_supported_image(source):
            raise ImageNotFoundError(f"Not a gallery image: {key}")
        try:
            result = source.stat()
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise ImageNotFoundError(f"Image not found: {key}") from exc
        except OSError as exc:
            raise ImageReadError(f"Unable to read image {key}: {exc}") from exc
        if not stat_module.S_ISREG(result.st_mode):
            raise ImageNotFoundError(f"Image not found: {key}")
        return result

    @staticmethod
    def _read_valid(cache_path: Path, source_stat: os.stat_result) -> Optional[bytes]:
        """Return the cached bytes, or ``None`` when the artifact must be rebuilt."""

        try:
            cache_stat = cache_path.stat()
            if cache_stat.st_size == 0 or cache_stat.st_mtime_ns < source_stat.st_mtime_ns:
                return None
            return cache_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.warning("Ignoring unreadable thumbnail %s: %s", cache_path.name, exc)
            return None

    def _generate(
        self, source: Path, key: str, cache_path: Path, source_stat: os.stat_result
    ) -> bytes:
        LOGGER.debug("Generating %dpx thumbnail for %s", self.size, key)
        data = render_thumbnail(source, size=self.size, quality=self.quality)
        try:
            atomic_write_bytes(cache_path, data)
            # Stamp exactly the mtime of the rendered source; later edits make it stale.
            copy_mtime(cache_path, source_stat.st_mtime_ns)
        except OSError as exc:
            LOGGER.error("Failed to store thumbnail for %s: %s", key, exc)
            raise CacheWriteError(f"Unable to write thumbnail for {key}: {exc}", payload=data) from exc
        return data

    @staticmethod
    def _payload(data: bytes) -> ImagePayload:
        return ImagePayload(data=data, mime=THUMB_MIME, etag=bytes_xxh3(data))
