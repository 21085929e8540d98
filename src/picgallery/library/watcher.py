"""Polling-based change detection for the image root."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional

from ..config import CACHE_DIR_NAME, WATCH_INTERVAL_SEC
from ..io.scanner import scan_gallery
from ..models.types import ChangeEvent, GallerySnapshot, diff_snapshots
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

Scanner = Callable[[Path], GallerySnapshot]


class ChangeWatcher:
    """Rescan the image root periodically and publish added/removed paths.

    The watcher owns the latest :class:`GallerySnapshot`; readers receive the
    immutable object and never observe a half-built listing. Ticks run on a
    daemon thread so request handlers are never blocked by a walk.
    """

    def __init__(
        self,
        root: Path,
        *,
        interval: float = WATCH_INTERVAL_SEC,
        cache_dir_name: str = CACHE_DIR_NAME,
        scanner: Optional[Scanner] = None,
    ) -> None:
        self.root = root
        self.interval = interval
        self._cache_dir_name = cache_dir_name
        self._scanner: Scanner = scanner or self._default_scan
        self._state_lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._snapshot: Optional[GallerySnapshot] = None
        self._latest_event = ChangeEvent()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> Optional[GallerySnapshot]:
        with self._state_lock:
            return self._snapshot

    @property
    def latest_event(self) -> ChangeEvent:
        with self._state_lock:
            return self._latest_event

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------
    def tick(self) -> Optional[ChangeEvent]:
        """Scan once and return a :class:`ChangeEvent` if the path set changed.

        The first tick only establishes the baseline. The stored snapshot is
        replaced on every tick, changed or not.
        """

        with self._tick_lock:
            current = self._scanner(self.root)
            with self._state_lock:
                previous = self._snapshot
                self._snapshot = current
            if previous is None:
                return None
            event = diff_snapshots(previous, current)
            if event.is_empty:
                return None
            with self._state_lock:
                self._latest_event = event
        LOGGER.info(
            "Gallery changed: %d added, %d removed (%d images)",
            len(event.added),
            len(event.removed),
            current.count,
        )
        return event

    def ensure_snapshot(self) -> GallerySnapshot:
        """Return the cached snapshot, scanning synchronously if none exists."""

        snapshot = self.snapshot
        if snapshot is not None:
            return snapshot
        self.tick()
        snapshot = self.snapshot
        if snapshot is None:
            raise RuntimeError(f"Scanning {self.root} produced no snapshot")
        return snapshot

    def _default_scan(self, root: Path) -> GallerySnapshot:
        return scan_gallery(root, cache_dir_name=self._cache_dir_name)

    # ------------------------------------------------------------------
    # Background loop
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self.running:
            return
        self.ensure_snapshot()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="picgallery-watcher", daemon=True)
        self._thread.start()
        LOGGER.debug("Watching %s every %.1fs", self.root, self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.tick()
            except Exception:  # pragma: no cover - keep polling after unexpected failures
                LOGGER.exception("Change detection tick failed for %s", self.root)
