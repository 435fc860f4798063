"""Logging setup for the LAKEBLOCKS CLI.

Two handlers hang off the root logger:

- a Rich console handler on stderr, filtered by the -v/-q verbosity, and
- a "flight recorder": an in-memory ring of DEBUG records that is written to
  the log file only when something goes wrong (a WARNING or worse), or on
  exit when a flush is forced.

Store operations run on worker threads (``lakeblocks_*`` and
``lakeblocks-list``), so every detailed format includes the thread name.
Library code only ever calls ``logging.getLogger(__name__)``; nothing here
is needed to use the store programmatically.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from importlib import metadata
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Handler, Logger

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "lakeblocks"

CONSOLE_FORMAT = "%(prefix)s %(message)s"
DEBUG_CONSOLE_FORMAT = "%(asctime)s [%(threadName)s] %(name)s: %(message)s"
RECORDER_FORMAT = (
    "[%(asctime)s] [%(process)d:%(threadName)s] "
    "%(levelname)s %(name)s:%(lineno)d: %(message)s"
)

ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]


class ThirdPartyPrefixFilter(logging.Filter):
    """Tag records from other libraries with ``[<top-level package>]``.

    Project records get an empty prefix. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == PROJECT_PREFIX or name.startswith(PROJECT_PREFIX + "."):
            record.prefix = ""
        else:
            record.prefix = f"[{name.partition('.')[0]}]"
        return True


def verbosity_level(verbose: int = 0, quiet: int = 0) -> int:
    """Console level for ``verbose`` -v and ``quiet`` -q flags, around WARNING.

    Clamped to the DEBUG..CRITICAL range.
    """
    level = logging.WARNING - 10 * verbose + 10 * quiet
    return max(logging.DEBUG, min(logging.CRITICAL, level))


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the Rich console handler.

    Args:
        level: Minimum level shown; debug mode forces DEBUG.
        debug_mode: Show timestamps, thread names and source locations.
        color: False disables styling, matching Click-Extra's ``--no-color``.

    Returns:
        RichHandler: Handler writing to stderr.
    """
    color_system: ColorSystem | None = "auto" if color else None
    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=Console(color_system=color_system, stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter(DEBUG_CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Build the flight recorder: a `MemoryHandler` in front of a log file.

    The buffer holds up to ``capacity`` records and is written out when a
    record at ``flush_level`` or above arrives, when it fills up, or on
    close if ``flush_on_close`` is set. The file is truncated on open.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    target = logging.FileHandler(path, mode="w", encoding="utf-8")
    target.setLevel(logging.DEBUG)
    target.setFormatter(logging.Formatter(RECORDER_FORMAT))
    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=target,
        flushOnClose=flush_on_close,
    )


def configure_logging(  # pylint: disable=too-many-arguments
    *,
    level: int,
    debug_mode: bool = False,
    color: bool = True,
    log_path: Path | None = None,
    flight_capacity: int = 2000,
    flush_on_close: bool = False,
    logger_levels: dict[str, int] | None = None,
) -> list[Handler]:
    """Install the console handler and, given a ``log_path``, the flight recorder.

    The root logger passes everything through; each handler filters for
    itself. ``logger_levels`` then raises or lowers individual loggers, which
    affects both handlers.

    Returns:
        list[Handler]: The installed handlers, console first.
    """
    handlers: list[Handler] = [
        config_console_handler(level=level, debug_mode=debug_mode, color=color)
    ]
    if log_path is not None:
        handlers.append(
            config_flight_recorder(
                log_path, capacity=flight_capacity, flush_on_close=flush_on_close
            )
        )
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, lvl in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(lvl)
    return handlers


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[Handler],
    log_path: Path | None,
    flight_capacity: int | None,
    force_flush_fr: bool,
    logger_levels: dict[str, int],
) -> None:
    """Log a one-line INFO summary, then DEBUG details about the environment."""
    logger.info(
        "LAKEBLOCKS %s - console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        "ON" if log_path is not None else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s, CWD: %s", os.getpid(), Path.cwd())
    for dist in ("click", "click-extra", "rich"):
        try:
            logger.debug("%s: %s", dist, metadata.version(dist))
        except metadata.PackageNotFoundError:
            logger.debug("%s: <not installed>", dist)
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if log_path is not None:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            log_path,
            flight_capacity,
            force_flush_fr,
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()}
        or "<none>",
    )
