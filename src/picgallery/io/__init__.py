"""Filesystem scanning and image encoding."""
