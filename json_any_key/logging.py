"""Logging for json_any_key using Loguru.

The package disables its own Loguru namespace on import, so nothing is
emitted until an application opts in with :func:`configure_logging`. Only
DEBUG diagnostics are produced; errors are always raised, never logged.

Examples
--------
Enable diagnostics while debugging a payload::

    from json_any_key.logging import configure_logging
    configure_logging(level="DEBUG", format="console")

Module loggers:

>>> from json_any_key.logging import get_logger
>>> logger = get_logger(__name__)
"""

import sys
from contextlib import suppress
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from loguru import logger
from rich.logging import RichHandler

if TYPE_CHECKING:
    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json", "structured", "rich"]

NAMESPACE = "json_any_key"

_CURRENT_CONFIG: dict | None = None
_HANDLER_IDS: list[int] = []


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "structured",
    use_color: bool = True,
    include_timestamp: bool = True,
    force_reconfigure: bool = False,
) -> None:
    """Enable json_any_key log records and install a sink for them.

    Idempotent: calling it again with the same settings does nothing. Only
    handlers added by this function are replaced, so sinks installed by the
    application or by pytest are left alone.

    Parameters
    ----------
    level : LogLevel, default="INFO"
        Minimum level of the installed sink.
    format : LogFormat, default="structured"
        - "console": plain ``time level | module | message`` lines
        - "structured": colored ``name:function:line`` lines (Loguru native)
        - "json": one JSON document per record (Loguru ``serialize=True``)
        - "rich": ``rich.logging.RichHandler``
    use_color : bool, default=True
        Colorize the structured format (ignored when stderr is not a TTY).
    include_timestamp : bool, default=True
        Prefix console and structured lines with a timestamp.
    force_reconfigure : bool, default=False
        Reinstall the sink even if the settings did not change.
    """
    global _CURRENT_CONFIG

    current_config = {
        "level": level,
        "format": format,
        "use_color": use_color,
        "include_timestamp": include_timestamp,
    }

    if not force_reconfigure and current_config == _CURRENT_CONFIG:
        return

    _remove_handlers()

    if format == "rich":
        handler_id = logger.add(
            sink=RichHandler(
                rich_tracebacks=True,
                markup=False,
                show_time=include_timestamp,
                show_level=True,
                show_path=True,
            ),
            level=level,
            format="{message}",
            filter=NAMESPACE,
        )
    elif format == "json":
        handler_id = logger.add(
            sink=sys.stderr,
            level=level,
            serialize=True,
            filter=NAMESPACE,
        )
    elif format == "structured":
        colorize = use_color and sys.stderr.isatty()
        timestamp_fmt = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> " if include_timestamp else ""
        color_level = "<level>{level: <8}</level>" if colorize else "{level: <8}"
        structured_format = (
            f"{timestamp_fmt}[{color_level}]"
            "<cyan>{name}:{function}:{line}</cyan> | <level>{message}</level>"
        )
        handler_id = logger.add(
            sink=sys.stderr,
            level=level,
            format=structured_format,
            colorize=colorize,
            filter=NAMESPACE,
        )
    else:  # console
        timestamp_fmt = "{time:YYYY-MM-DD HH:mm:ss} " if include_timestamp else ""
        handler_id = logger.add(
            sink=sys.stderr,
            level=level,
            format=f"{timestamp_fmt}{{level: <8}} | {{name}} | {{message}}",
            colorize=False,
            filter=NAMESPACE,
        )
    _HANDLER_IDS.append(handler_id)

    logger.enable(NAMESPACE)
    _CURRENT_CONFIG = current_config


def disable_logging() -> None:
    """Remove the sink installed by :func:`configure_logging` and mute the package."""
    global _CURRENT_CONFIG

    _remove_handlers()
    logger.disable(NAMESPACE)
    _CURRENT_CONFIG = None


@lru_cache(maxsize=64)
def get_logger(name: str) -> "Logger":
    """Get a logger bound with the module name (cached).

    Parameters
    ----------
    name : str
        Logger name, typically ``__name__`` of the calling module

    Returns
    -------
    loguru.Logger
        Logger bound with ``module=name``
    """
    return logger.bind(module=name)


def _remove_handlers() -> None:
    for handler_id in _HANDLER_IDS:
        with suppress(ValueError):
            logger.remove(handler_id)
    _HANDLER_IDS.clear()


__all__ = [
    "NAMESPACE",
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "disable_logging",
    "get_logger",
]
