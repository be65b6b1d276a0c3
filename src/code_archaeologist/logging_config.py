"""
Logging for Code Archaeologist.

Diagnostics always go to stderr through rich, so ``--json`` output on stdout
stays machine-readable. ``--verbose`` shows every git invocation the
analyses make along with timing and source locations.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "code_archaeologist"

# Their DEBUG output (event loop, subprocess transports) would drown the git trace
_NOISY_LOGGERS = ("asyncio",)

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Route log records to a rich handler on stderr, and optionally a file.

    Safe to call once per command; earlier handlers are replaced.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Only report errors (takes precedence over verbose)
        log_file: Append plain-text records to this file as well

    Returns:
        The package logger (``code_archaeologist``)
    """
    level = _level(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            level=level,
            # Commit messages and git stderr contain brackets
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            show_time=verbose,
            show_path=verbose,
            omit_repeated_times=False,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger under the ``code_archaeologist`` namespace.

    ``get_logger(__name__)`` inside the package returns the module logger
    unchanged; any other name is prefixed, e.g. ``temporal.history`` becomes
    ``code_archaeologist.temporal.history``.
    """
    if name is None:
        return logging.getLogger(_ROOT_LOGGER)
    if name != _ROOT_LOGGER and not name.startswith(_ROOT_LOGGER + "."):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
