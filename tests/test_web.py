from __future__ import annotations

import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from picgallery.app import Gallery
from picgallery.errors import (
    CacheWriteError,
    ImageNotFoundError,
    ImageReadError,
    InvalidPathError,
    LockTimeoutError,
    UnsupportedFormatError,
)
from picgallery.web.server import create_app, status_for


@pytest.fixture()
def gallery(image_root: Path) -> Gallery:
    return Gallery(image_root)


@pytest.fixture()
def client(gallery: Gallery):
    with TestClient(create_app(gallery, watch=False)) as test_client:
        yield test_client


def test_index_page(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "/api/images" in response.text


def test_api_images_lists_gallery(client: TestClient, make_image) -> None:
    make_image("b.png")
    make_image("sub/a.jpg")

    response = client.get("/api/images")

    assert response.status_code == 200
    assert response.json() == {
        "count": 2,
        "images": [{"path": "b.png", "name": "b.png"}, {"path": "sub/a.jpg", "name": "a.jpg"}],
    }


def test_api_changes_reports_latest_event(client: TestClient, gallery: Gallery, make_image) -> None:
    make_image("first.jpg")
    assert client.get("/api/changes").json() == {"sequence": 0, "added": [], "removed": []}

    client.get("/api/images")
    make_image("second.jpg")
    gallery.watcher.tick()

    payload = client.get("/api/changes").json()
    assert payload["added"] == ["second.jpg"]
    assert payload["removed"] == []
    assert payload["sequence"] == gallery.list_images().sequence


def test_thumbnail_route_and_conditional_request(client: TestClient, make_image) -> None:
    make_image("photo.jpg", size=(800, 600))

    response = client.get("/thumb/photo.jpg")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert Image.open(io.BytesIO(response.content)).size == (200, 150)
    etag = response.headers["etag"]

    cached = client.get("/thumb/photo.jpg", headers={"If-None-Match": etag})
    assert cached.status_code == 304
    assert cached.content == b""


def test_original_route_serves_source_bytes(client: TestClient, make_image) -> None:
    source = make_image("sub dir/фото.png", size=(40, 30))

    response = client.get("/pic/sub%20dir/%D1%84%D0%BE%D1%82%D0%BE.png")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == source.read_bytes()


@pytest.mark.parametrize(
    ("url", "status"),
    [
        ("/pic/missing.jpg", 404),
        ("/thumb/missing.jpg", 404),
        ("/pic/..%2F..%2Fetc%2Fpasswd", 400),
        ("/thumb/..%2F..%2Fetc%2Fpasswd", 400),
        ("/thumb/.thumbnails/x.jpg", 400),
        ("/thumb/broken.jpg", 415),
    ],
)
def test_errors_map_to_status_codes(client: TestClient, image_root: Path, url: str, status: int) -> None:
    (image_root / "broken.jpg").write_bytes(b"garbage")

    response = client.get(url)

    assert response.status_code == status


def test_unreadable_original_is_reported_as_server_error(client: TestClient, make_image, mocker) -> None:
    make_image("photo.jpg")
    mocker.patch.object(Path, "read_bytes", side_effect=PermissionError(13, "Permission denied"))

    response = client.get("/pic/photo.jpg")

    assert response.status_code == 500
    assert "Unable to read image" in response.text


def test_status_for_error_kinds() -> None:
    assert status_for(InvalidPathError("x")) == 400
    assert status_for(ImageNotFoundError("x")) == 404
    assert status_for(UnsupportedFormatError("x")) == 415
    assert status_for(ImageReadError("x")) == 500
    assert status_for(CacheWriteError("x")) == 500
    assert status_for(LockTimeoutError("x")) == 503


def test_lifespan_starts_and_stops_watcher(gallery: Gallery) -> None:
    with TestClient(create_app(gallery)):
        assert gallery.watcher.running
    assert not gallery.watcher.running
