"""Logging setup for surfacecheck.

Diagnostics always go to stderr through rich, so JSON and Markdown reports
printed on stdout stay machine-readable.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "surfacecheck"

# Only interesting when debugging a provider call
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")

_handler: RichHandler | None = None


def level_for(verbose: bool = False, quiet: bool = False) -> str:
    """Map the CLI verbosity flags to a level name.

    ``--verbose`` wins over ``--quiet``.
    """
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return "INFO"


def configure_logging(level: str = "INFO", show_path: bool | None = None) -> None:
    """Route logging through a single rich handler on stderr.

    Calling this again replaces the handler installed by the previous call,
    so the level always follows the latest CLI invocation. Third-party
    loggers stay at WARNING regardless of ``level``.

    Args:
        level: Level name applied to surfacecheck loggers.
        show_path: Show the emitting module. Defaults to on at DEBUG.
    """
    global _handler

    level = level.upper()
    debug = level == "DEBUG"

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = RichHandler(
        console=Console(stderr=True),
        show_time=debug,
        show_path=debug if show_path is None else show_path,
        rich_tracebacks=True,
        markup=False,
    )
    _handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(_handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module name.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
