"""Thumbnail cache storage and per-key locking."""
