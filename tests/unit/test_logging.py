"""Tests for logging setup."""

import logging
from collections.abc import Iterator

import pytest
from rich.logging import RichHandler

from surfacecheck.utils.logging import (
    PACKAGE_LOGGER,
    configure_logging,
    get_logger,
    level_for,
)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo handler and level changes made by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    root_level = root.level
    package_level = logging.getLogger(PACKAGE_LOGGER).level
    yield
    root.handlers = handlers
    root.setLevel(root_level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)


def _rich_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]


class TestLevelFor:
    """Tests for mapping CLI flags to levels."""

    def test_default(self) -> None:
        assert level_for() == "INFO"

    def test_verbose(self) -> None:
        assert level_for(verbose=True) == "DEBUG"

    def test_quiet(self) -> None:
        assert level_for(quiet=True) == "WARNING"

    def test_verbose_wins(self) -> None:
        """--verbose takes precedence over --quiet."""
        assert level_for(verbose=True, quiet=True) == "DEBUG"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_package_level(self) -> None:
        configure_logging("debug")
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
        assert get_logger("surfacecheck.analysis.differ").getEffectiveLevel() == logging.DEBUG

    def test_quiets_third_party(self) -> None:
        configure_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_reconfigure_replaces_handler(self) -> None:
        """Repeated calls keep one handler and apply the latest level."""
        before = len(_rich_handlers())
        configure_logging("DEBUG")
        configure_logging("WARNING")
        assert len(_rich_handlers()) <= before + 1
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING

    def test_get_logger_name(self) -> None:
        assert get_logger("surfacecheck.cli").name == "surfacecheck.cli"
