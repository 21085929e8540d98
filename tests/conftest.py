import sys
from pathlib import Path
from typing import Callable, Tuple

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Allow running the suite from a checkout without installing the package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _create_image(path: Path, size: Tuple[int, int] = (10, 10), color: str = "red", mode: str = "RGB") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color=color).save(path)
    return path


@pytest.fixture()
def image_root(tmp_path: Path) -> Path:
    root = tmp_path / "pics"
    root.mkdir()
    return root


@pytest.fixture()
def make_image(image_root: Path) -> Callable[..., Path]:
    """Return a helper that writes a solid-colour image below ``image_root``."""

    def _make(rel: str, size: Tuple[int, int] = (10, 10), color: str = "red", mode: str = "RGB") -> Path:
        return _create_image(image_root / rel, size=size, color=color, mode=mode)

    return _make
