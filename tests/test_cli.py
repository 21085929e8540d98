from __future__ import annotations

from pathlib import Path

import pytest

from picgallery import cli
from picgallery.config import DEFAULT_HOST, DEFAULT_PORT, THUMB_SIZE, WATCH_INTERVAL_SEC


def test_defaults_without_arguments_or_environment() -> None:
    settings = cli.parse_settings([], environ={})

    assert settings.port == DEFAULT_PORT
    assert settings.pic_dir == Path("./pic")
    assert settings.host == DEFAULT_HOST
    assert settings.thumb_size == THUMB_SIZE
    assert settings.interval == WATCH_INTERVAL_SEC
    assert settings.log_level == "info"


def test_environment_supplies_port_and_directory() -> None:
    settings = cli.parse_settings([], environ={"PIC_PORT": "9000", "PIC_DIR": "/data", "PIC_LOG_LEVEL": "DEBUG"})

    assert settings.port == 9000
    assert settings.pic_dir == Path("/data")
    assert settings.log_level == "debug"


def test_command_line_overrides_environment() -> None:
    settings = cli.parse_settings(
        ["-p", "8080", "--dir", "./photos", "--thumb-size", "320", "--interval", "1.5"],
        environ={"PIC_PORT": "9000", "PIC_DIR": "/data"},
    )

    assert settings.port == 8080
    assert settings.pic_dir == Path("./photos")
    assert settings.thumb_size == 320
    assert settings.interval == 1.5


@pytest.mark.parametrize("argv", [["-p", "0"], ["-p", "abc"], ["-p", "70000"], ["--thumb-size", "0"], ["--log-level", "loud"]])
def test_invalid_arguments_exit_with_usage_error(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_settings(argv, environ={})
    assert excinfo.value.code == 2


def test_invalid_environment_port_exits() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_settings([], environ={"PIC_PORT": "abc"})
    assert excinfo.value.code == 2


def test_main_prepares_directories_and_runs_server(tmp_path: Path, mocker, monkeypatch) -> None:
    for name in ("PIC_PORT", "PIC_DIR", "PIC_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    run = mocker.patch("uvicorn.run")
    pic_dir = tmp_path / "pic"

    assert cli.main(["-d", str(pic_dir), "-p", "8081", "--host", "127.0.0.1"]) == 0

    assert (pic_dir / ".thumbnails").is_dir()
    run.assert_called_once()
    _, kwargs = run.call_args
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 8081
    assert kwargs["log_level"] == "info"
