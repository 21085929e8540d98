"""Helpers for binary file output with atomic replacement."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomically write *data* into *path*.

    The payload lands in a uniquely named sibling first so concurrent writers
    never share a temporary file and readers never observe a partial target.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        try:
            tmp_path.replace(path)
        except PermissionError as exc:
            if sys.platform != "win32":
                raise
            _replace_file_windows(tmp_path, path, exc)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _replace_file_windows(tmp_path: Path, path: Path, original_error: PermissionError) -> None:
    """Replace *path* with *tmp_path* using the Windows API."""

    import ctypes
    from ctypes import wintypes

    replace_file = ctypes.windll.kernel32.ReplaceFileW
    replace_file.argtypes = [
        wintypes.LPCWSTR,
        wintypes.LPCWSTR,
        wintypes.LPCWSTR,
        wintypes.DWORD,
        wintypes.LPVOID,
        wintypes.LPVOID,
    ]
    replace_file.restype = wintypes.BOOL

    ctypes.set_last_error(0)
    succeeded = replace_file(
        wintypes.LPCWSTR(str(path)),
        wintypes.LPCWSTR(str(tmp_path)),
        None,
        wintypes.DWORD(0x00000002),  # REPLACEFILE_WRITE_THROUGH
        None,
        None,
    )
    if not succeeded:
        error_code = ctypes.get_last_error()
        raise PermissionError(error_code, os.strerror(error_code), str(path)) from original_error


def copy_mtime(path: Path, mtime_ns: int) -> None:
    """Stamp *path* with exactly *mtime_ns*, keeping its access time."""

    os.utime(path, ns=(path.stat().st_atime_ns, mtime_ns))
