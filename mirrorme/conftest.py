import os
from pathlib import Path
import sys
import tempfile

from loguru import logger
import pytest
from pytest import LogCaptureFixture

from .logger import mask_record
from .typed_path import AbsDir


@pytest.fixture
def typed_tmp_path(tmp_path: Path) -> AbsDir:
    return AbsDir(tmp_path)


@pytest.fixture
def scratch_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect temporary files and directories into an empty folder."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", os.fspath(scratch))
    return scratch


@pytest.fixture(autouse=True)
def log_everything() -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="TRACE",
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - {message}",
        filter=mask_record,
    )


@pytest.fixture
def log_level() -> str:
    return "TRACE"


@pytest.fixture
def log_cleanly(caplog: LogCaptureFixture, log_level: str) -> None:
    logger.remove()
    logger.add(caplog.handler, level=log_level, colorize=False, format="{message}")
