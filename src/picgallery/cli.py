"""Command-line entry point for the gallery server."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .config import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PIC_DIR,
    DEFAULT_PORT,
    ENV_LOG_LEVEL,
    ENV_PIC_DIR,
    ENV_PORT,
    THUMB_SIZE,
    WATCH_INTERVAL_SEC,
)
from .utils.logging import configure_logging, get_logger, parse_level

LOGGER = get_logger(__name__)

_EPILOG = f"""\
environment variables:
  {ENV_PORT}               server port
  {ENV_PIC_DIR}                image directory
  {ENV_LOG_LEVEL}          log level

command-line options take precedence over the environment.
"""


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    pic_dir: Path
    thumb_size: int
    interval: float
    log_level: str


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port number: {value!r}") from None
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError(f"port must be between 1 and 65535: {value!r}")
    return port


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value!r}")
    return number


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="picgallery",
        description="Serve a directory of images as a browsable gallery.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-p", "--port", type=_port, help=f"server port (default: {DEFAULT_PORT})")
    parser.add_argument("-d", "--dir", dest="pic_dir", help=f"image directory (default: {DEFAULT_PIC_DIR})")
    parser.add_argument("--host", default=DEFAULT_HOST, help=f"bind address (default: {DEFAULT_HOST})")
    parser.add_argument(
        "--thumb-size",
        type=_positive_int,
        default=THUMB_SIZE,
        help=f"longer edge of generated thumbnails in pixels (default: {THUMB_SIZE})",
    )
    parser.add_argument(
        "--interval",
        type=_positive_float,
        default=WATCH_INTERVAL_SEC,
        help=f"seconds between change scans (default: {WATCH_INTERVAL_SEC:g})",
    )
    parser.add_argument("--log-level", help=f"logging verbosity (default: {DEFAULT_LOG_LEVEL})")
    return parser


def parse_settings(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerSettings:
    """Resolve settings from *argv*, then *environ*, then the defaults."""

    env = os.environ if environ is None else environ
    parser = build_parser()
    args = parser.parse_args(argv)

    port = args.port
    if port is None and env.get(ENV_PORT):
        try:
            port = _port(env[ENV_PORT])
        except argparse.ArgumentTypeError as exc:
            parser.error(f"environment variable {ENV_PORT}: {exc}")

    log_level = args.log_level or env.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    try:
        parse_level(log_level)
    except ValueError as exc:
        parser.error(str(exc))

    pic_dir = args.pic_dir or env.get(ENV_PIC_DIR) or DEFAULT_PIC_DIR
    return ServerSettings(
        host=args.host,
        port=port if port is not None else DEFAULT_PORT,
        pic_dir=Path(pic_dir).expanduser(),
        thumb_size=args.thumb_size,
        interval=args.interval,
        log_level=log_level.lower(),
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, prepare the image directory and run the server."""

    settings = parse_settings(argv)
    configure_logging(settings.log_level)

    import uvicorn

    from .app import Gallery
    from .web.server import create_app

    existed = settings.pic_dir.exists()
    gallery = Gallery(
        settings.pic_dir,
        thumb_size=settings.thumb_size,
        watch_interval=settings.interval,
    )
    if not existed:
        LOGGER.info("Created image directory %s", gallery.root)
    LOGGER.info("Image directory: %s", gallery.root)
    LOGGER.info("Thumbnail directory: %s", gallery.cache_dir)
    LOGGER.info("Listening on http://%s:%d/", settings.host, settings.port)
    LOGGER.info("Change detection every %.1fs", settings.interval)

    uvicorn.run(create_app(gallery), host=settings.host, port=settings.port, log_level=settings.log_level)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual launch
    raise SystemExit(main())
