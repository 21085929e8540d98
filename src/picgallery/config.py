"""Default configuration values for picgallery."""

from __future__ import annotations

from typing import Final

CACHE_DIR_NAME: Final[str] = ".thumbnails"
IMAGE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".ico"}
)

# ---------------------------------------------------------------------------
# Thumbnail generation
# ---------------------------------------------------------------------------

THUMB_SIZE: Final[int] = 200
THUMB_JPEG_QUALITY: Final[int] = 85
THUMB_MIME: Final[str] = "image/jpeg"
THUMB_SUFFIX: Final[str] = ".jpg"
LOCK_TIMEOUT_SEC: Final[float] = 30.0

# Most filesystems cap a single path component at 255 bytes.
CACHE_NAME_MAX_BYTES: Final[int] = 255

# ---------------------------------------------------------------------------
# Change detection
# ---------------------------------------------------------------------------

WATCH_INTERVAL_SEC: Final[float] = 3.0

# ---------------------------------------------------------------------------
# Server defaults
# ---------------------------------------------------------------------------

DEFAULT_HOST: Final[str] = "0.0.0.0"
DEFAULT_PORT: Final[int] = 2020
DEFAULT_PIC_DIR: Final[str] = "./pic"
DEFAULT_LOG_LEVEL: Final[str] = "info"

ENV_PORT: Final[str] = "PIC_PORT"
ENV_PIC_DIR: Final[str] = "PIC_DIR"
ENV_LOG_LEVEL: Final[str] = "PIC_LOG_LEVEL"
