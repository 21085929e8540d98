from __future__ import annotations

from pathlib import Path

import pytest

from picgallery.config import CACHE_NAME_MAX_BYTES
from picgallery.errors import InvalidPathError
from picgallery.utils.pathutils import cache_file_name, guess_mime, is_supported_image, resolve_relative


@pytest.mark.parametrize(
    ("requested", "expected"),
    [
        ("a.jpg", "a.jpg"),
        ("sub/b.png", "sub/b.png"),
        ("./sub/../a.jpg", "a.jpg"),
        ("sub//deeper/c.gif", "sub/deeper/c.gif"),
        (".thumbnails/../a.jpg", "a.jpg"),
        ("sub/.thumbnails/x.jpg", "sub/.thumbnails/x.jpg"),
    ],
)
def test_resolve_relative_normalises_inside_root(tmp_path: Path, requested: str, expected: str) -> None:
    resolved = resolve_relative(tmp_path, requested)
    assert resolved == tmp_path.joinpath(*expected.split("/"))


def test_resolve_relative_does_not_require_existence(tmp_path: Path) -> None:
    resolved = resolve_relative(tmp_path, "missing/photo.jpg")
    assert not resolved.exists()
    assert resolved.parent.parent == tmp_path


@pytest.mark.parametrize(
    "requested",
    [
        "",
        "   ",
        ".",
        "..",
        "../../etc/passwd",
        "sub/../../outside.jpg",
        "/etc/passwd",
        "\\\\server\\share\\x.jpg",
        "C:/Windows/x.jpg",
        "C:x.jpg",
        "a\x00.jpg",
        ".thumbnails/x.jpg",
        ".THUMBNAILS/x.jpg",
        ".thumbnails",
        "sub/../.thumbnails/x.jpg",
    ],
)
def test_resolve_relative_rejects_unsafe_paths(tmp_path: Path, requested: str) -> None:
    with pytest.raises(InvalidPathError):
        resolve_relative(tmp_path, requested)


def test_resolve_relative_honours_custom_cache_dir(tmp_path: Path) -> None:
    assert resolve_relative(tmp_path, ".thumbnails/x.jpg", cache_dir_name=".cache") == tmp_path / ".thumbnails" / "x.jpg"
    with pytest.raises(InvalidPathError):
        resolve_relative(tmp_path, ".cache/x.jpg", cache_dir_name=".cache")


def test_cache_file_name_escapes_separators() -> None:
    assert cache_file_name("a/b.jpg") == "a%2Fb.jpg.jpg"
    assert cache_file_name("a/b.jpg") != cache_file_name("a%2Fb.jpg")
    assert cache_file_name("a.jpg") != cache_file_name("a.jpg.jpg")


def test_cache_file_name_is_ascii_for_unicode_paths() -> None:
    name = cache_file_name("фото/снимок 1.png")
    assert name.isascii()
    assert "/" not in name
    assert name.endswith(".jpg")


def test_cache_file_name_shortens_long_paths() -> None:
    base = "/".join(["very-long-directory-name"] * 20)
    first = cache_file_name(f"{base}/one.jpg")
    second = cache_file_name(f"{base}/two.jpg")

    assert len(first) <= CACHE_NAME_MAX_BYTES
    assert len(second) <= CACHE_NAME_MAX_BYTES
    assert "%%" in first
    assert first != second
    assert first == cache_file_name(f"{base}/one.jpg")


@pytest.mark.parametrize("name", ["a.jpg", "B.JPEG", "c.png", "d.Gif", "e.webp", "f.bmp", "g.ico"])
def test_is_supported_image_accepts_gallery_formats(name: str) -> None:
    assert is_supported_image(name)


@pytest.mark.parametrize("name", ["notes.txt", "clip.mp4", "scan.tiff", "jpg", "archive.jpg.zip"])
def test_is_supported_image_rejects_other_files(name: str) -> None:
    assert not is_supported_image(name)


def test_guess_mime() -> None:
    assert guess_mime("a.png") == "image/png"
    assert guess_mime("a.JPG") == "image/jpeg"
    assert guess_mime("a.webp") == "image/webp"
    assert guess_mime("a.unknownext") == "application/octet-stream"
