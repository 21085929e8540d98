"""Browsable image gallery with an on-demand thumbnail cache."""

from __future__ import annotations

__version__ = "0.1.0"
