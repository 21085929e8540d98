"""Gallery listing and change detection."""

from .watcher import ChangeWatcher

__all__ = ["ChangeWatcher"]
