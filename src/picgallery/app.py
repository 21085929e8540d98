"""High-level gallery facade consumed by the HTTP layer."""

from __future__ import annotations

import stat as stat_module
from pathlib import Path
from typing import Optional

from .cache.thumbnail_store import ThumbnailStore
from .config import CACHE_DIR_NAME, LOCK_TIMEOUT_SEC, THUMB_MIME, THUMB_SIZE, WATCH_INTERVAL_SEC
from .errors import CacheWriteError, ImageNotFoundError, ImageReadError
from .library.watcher import ChangeWatcher
from .models.types import ChangeEvent, GallerySnapshot, ImagePayload
from .utils.hashutils import bytes_xxh3
from .utils.logging import get_logger
from .utils.pathutils import guess_mime, is_supported_image, resolve_relative

LOGGER = get_logger()


class Gallery:
    """Expose listing, original, thumbnail and change polling for one root.

    Listings always come from the watcher's snapshot. Before the watcher has
    produced one, the first caller scans synchronously and installs the result
    as the watcher's baseline, so the page and the polling endpoint agree.
    """

    def __init__(
        self,
        root: Path,
        *,
        cache_dir_name: str = CACHE_DIR_NAME,
        thumb_size: int = THUMB_SIZE,
        watch_interval: float = WATCH_INTERVAL_SEC,
        lock_timeout: Optional[float] = LOCK_TIMEOUT_SEC,
    ) -> None:
        self.root = root.expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.cache_dir_name = cache_dir_name
        self.thumbnails = ThumbnailStore(
            self.root,
            cache_dir_name=cache_dir_name,
            size=thumb_size,
            lock_timeout=lock_timeout,
        )
        self.watcher = ChangeWatcher(self.root, interval=watch_interval, cache_dir_name=cache_dir_name)

    @property
    def cache_dir(self) -> Path:
        return self.thumbnails.cache_dir

    def start(self) -> None:
        self.watcher.start()

    def stop(self) -> None:
        self.watcher.stop()

    def list_images(self) -> GallerySnapshot:
        return self.watcher.ensure_snapshot()

    def poll_changes(self) -> ChangeEvent:
        """Return the most recent change event (empty until something changes)."""

        return self.watcher.latest_event

    def get_original(self, rel: str) -> ImagePayload:
        source = resolve_relative(self.root, rel, cache_dir_name=self.cache_dir_name)
        if not is_supported_image(source):
            raise ImageNotFoundError(f"Not a gallery image: {rel}")
        try:
            if not stat_module.S_ISREG(source.stat().st_mode):
                raise ImageNotFoundError(f"Image not found: {rel}")
            data = source.read_bytes()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as exc:
            raise ImageNotFoundError(f"Image not found: {rel}") from exc
        except OSError as exc:
            raise ImageReadError(f"Unable to read image {rel}: {exc}") from exc
        return ImagePayload(data=data, mime=guess_mime(source), etag=bytes_xxh3(data))

    def get_thumbnail(self, rel: str) -> ImagePayload:
        """Return the thumbnail for *rel*.

        When the freshly rendered thumbnail cannot be written to the cache the
        in-memory bytes are still served; the next request retries the write.
        """

        try:
            return self.thumbnails.get_thumbnail(rel)
        except CacheWriteError as exc:
            if exc.payload is None:
                raise
            LOGGER.warning("Serving uncached thumbnail for %s: %s", rel, exc)
            return ImagePayload(data=exc.payload, mime=THUMB_MIME, etag=bytes_xxh3(exc.payload))
