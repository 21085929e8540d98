"""FastAPI application exposing the gallery over HTTP."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Type

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from ..app import Gallery
from ..errors import (
    CacheWriteError,
    GalleryError,
    ImageNotFoundError,
    ImageReadError,
    InvalidPathError,
    LockTimeoutError,
    UnsupportedFormatError,
)
from ..models.types import ImagePayload
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

INDEX_PAGE = Path(__file__).resolve().parent / "static" / "index.html"

_STATUS_BY_ERROR: Dict[Type[GalleryError], int] = {
    InvalidPathError: 400,
    ImageNotFoundError: 404,
    ImageReadError: 500,
    UnsupportedFormatError: 415,
    CacheWriteError: 500,
    LockTimeoutError: 503,
}


def status_for(exc: GalleryError) -> int:
    """Return the HTTP status code that represents *exc*."""

    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


def _image_response(payload: ImagePayload, request: Request) -> Response:
    etag = f'"{payload.etag}"'
    headers = {"ETag": etag, "Cache-Control": "no-cache"}
    if_none_match = request.headers.get("if-none-match")
    if if_none_match and etag in {tag.strip() for tag in if_none_match.split(",")}:
        return Response(status_code=304, headers=headers)
    return Response(content=payload.data, media_type=payload.mime, headers=headers)


def create_app(gallery: Gallery, *, watch: bool = True) -> FastAPI:
    """Build the application serving *gallery*.

    With *watch* enabled the change watcher runs for the lifetime of the
    application.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if watch:
            gallery.start()
        try:
            yield
        finally:
            gallery.stop()

    app = FastAPI(title="picgallery", docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.gallery = gallery
    index_html = INDEX_PAGE.read_text(encoding="utf-8")

    @app.exception_handler(GalleryError)
    async def _handle_gallery_error(request: Request, exc: GalleryError) -> Response:
        status = status_for(exc)
        if status >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
        return PlainTextResponse(str(exc), status_code=status)

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(index_html)

    @app.get("/api/images")
    def api_images() -> Dict[str, Any]:
        return gallery.list_images().to_payload()

    @app.get("/api/changes")
    def api_changes() -> Dict[str, Any]:
        return gallery.poll_changes().to_payload()

    @app.get("/thumb/{path:path}")
    def thumbnail(path: str, request: Request) -> Response:
        return _image_response(gallery.get_thumbnail(path), request)

    @app.get("/pic/{path:path}")
    def original(path: str, request: Request) -> Response:
        return _image_response(gallery.get_original(path), request)

    return app
