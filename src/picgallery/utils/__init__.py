"""Shared filesystem, hashing and logging helpers."""
