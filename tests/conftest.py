"""
Shared fixtures for the test suite.
"""
import sys

import pytest
from loguru import logger

from import_converter.config.settings import Settings


@pytest.fixture(autouse=True)
def quiet_logger():
    """Sends loguru output to the captured stderr of the running test only."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")
    yield
    logger.remove()


@pytest.fixture
def make_settings(tmp_path):
    """Factory for `Settings` pointing at a fresh source/destination pair below tmp_path."""

    def _make(**overrides) -> Settings:
        values = dict(
            copy_extensions=("*.jpg", "*.txt"),
            reencode_extensions=("*.mp4",),
            source_dir=tmp_path / "source",
            destination_dir=tmp_path / "destination",
            dry_run=False,
            handbrake_cli="HandBrakeCLI",
            encoding_options="--encoder x265 --quality 24",
            new_file_extension="mkv",
            path_format="%Y/%m",
            filename_prefix="%Y%m%d_",
            use_ffprobe=False,
        )
        values.update(overrides)
        values["source_dir"].mkdir(parents=True, exist_ok=True)
        return Settings(**values)

    return _make
