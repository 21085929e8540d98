"""Utilities for working with filesystem paths inside picgallery."""

from __future__ import annotations

import mimetypes
import os
import posixpath
import re
from pathlib import Path, PurePosixPath, PureWindowsPath
from urllib.parse import quote

from ..config import CACHE_DIR_NAME, CACHE_NAME_MAX_BYTES, IMAGE_EXTENSIONS, THUMB_SUFFIX
from ..errors import InvalidPathError
from .hashutils import text_xxh3

# Older interpreters ship without these registrations.
mimetypes.add_type("image/webp", ".webp")
mimetypes.add_type("image/vnd.microsoft.icon", ".ico")

_TRAILING_PARTIAL_ESCAPE = re.compile(r"%[0-9A-F]?$")


def resolve_relative(root: Path, requested: str, *, cache_dir_name: str = CACHE_DIR_NAME) -> Path:
    """Return the absolute path of *requested* inside *root*.

    The check is purely lexical: the client path is normalised with POSIX
    semantics and must stay below *root* without touching the reserved cache
    directory. Whether the target exists is left to the caller.
    """

    if not requested or not requested.strip():
        raise InvalidPathError("Empty image path")
    if "\x00" in requested:
        raise InvalidPathError("Image path contains a NUL byte")
    if os.sep != "/":
        requested = requested.replace(os.sep, "/")
    windows = PureWindowsPath(requested)
    if (
        requested.startswith(("/", "\\"))
        or PurePosixPath(requested).is_absolute()
        or windows.is_absolute()
        or windows.drive
    ):
        raise InvalidPathError(f"Absolute paths are not allowed: {requested!r}")

    normalized = posixpath.normpath(requested)
    parts = normalized.split("/")
    if normalized in ("", ".") or parts[0] == "..":
        raise InvalidPathError(f"Path escapes the image root: {requested!r}")
    if parts[0].casefold() == cache_dir_name.casefold():
        raise InvalidPathError(f"Path targets the thumbnail cache: {requested!r}")
    return root.joinpath(*parts)


def is_supported_image(path: Path | str) -> bool:
    """Return ``True`` when *path* carries one of the gallery extensions."""

    return PurePosixPath(str(path)).suffix.lower() in IMAGE_EXTENSIONS


def guess_mime(path: Path | str) -> str:
    mime, _ = mimetypes.guess_type(str(path))
    return mime or "application/octet-stream"


def cache_file_name(rel: str) -> str:
    """Map a root-relative image path to a flat, filesystem-safe file name.

    Percent-encoding every reserved character (including ``/`` and ``%``)
    keeps the mapping injective. Names that would exceed the filesystem's
    component limit keep a readable prefix and append ``%%`` plus a digest of
    the full path; ``%%`` never occurs in percent-encoded text so shortened
    names cannot clash with regular ones.
    """

    encoded = quote(rel, safe="") + THUMB_SUFFIX
    if len(encoded) <= CACHE_NAME_MAX_BYTES:
        return encoded
    digest = text_xxh3(rel)
    budget = CACHE_NAME_MAX_BYTES - len(digest) - len(THUMB_SUFFIX) - 2
    prefix = _TRAILING_PARTIAL_ESCAPE.sub("", encoded[:budget])
    return f"{prefix}%%{digest}{THUMB_SUFFIX}"


def ensure_cache_dir(root: Path, name: str = CACHE_DIR_NAME) -> Path:
    """Ensure that the thumbnail cache directory exists and return it."""

    cache_dir = root / name
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
