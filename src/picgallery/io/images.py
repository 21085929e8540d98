"""Pillow-backed thumbnail rendering."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import THUMB_JPEG_QUALITY, THUMB_SIZE
from ..errors import ImageNotFoundError, ImageReadError, UnsupportedFormatError

_BACKGROUND = (255, 255, 255)


def fit_longer_edge(width: int, height: int, size: int) -> Tuple[int, int]:
    """Scale ``(width, height)`` so the longer edge equals *size*."""

    ratio = size / max(width, height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def _flatten(image: Image.Image) -> Image.Image:
    """Return an RGB copy of *image* with transparency composited on white."""

    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    if image.mode in ("RGBA", "LA", "PA"):
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, _BACKGROUND)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def render_thumbnail(
    source: Path,
    *,
    size: int = THUMB_SIZE,
    quality: int = THUMB_JPEG_QUALITY,
) -> bytes:
    """Decode *source* and return JPEG bytes whose longer edge equals *size*.

    EXIF orientation is applied before measuring, and only the first frame of
    animated formats is used.
    """

    try:
        handle = source.open("rb")
    except FileNotFoundError as exc:
        raise ImageNotFoundError(f"Image disappeared while decoding: {source}") from exc
    except OSError as exc:
        raise ImageReadError(f"Unable to read image {source}: {exc}") from exc

    with handle:
        try:
            with Image.open(handle) as img:
                img.seek(0)
                oriented = ImageOps.exif_transpose(img)
                oriented.load()
        except UnidentifiedImageError as exc:
            raise UnsupportedFormatError(f"Unable to decode image {source}") from exc
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise UnsupportedFormatError(f"Corrupted image {source}: {exc}") from exc

    target = fit_longer_edge(oriented.width, oriented.height, size)
    try:
        thumbnail = _flatten(oriented).resize(target, Image.Resampling.LANCZOS)
    except (OSError, ValueError) as exc:
        raise UnsupportedFormatError(f"Unsupported pixel data in {source}: {exc}") from exc

    buffer = io.BytesIO()
    thumbnail.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()
