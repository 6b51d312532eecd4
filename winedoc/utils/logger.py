"""Centralized logging setup for winedoc.

Every module obtains its logger through :func:`get_logger`; only entry
points (the CLI) call :func:`setup_logging`. Records go to stderr because
the CLI writes its JSON and CSV results to stdout.
"""

import logging
import sys

from winedoc.utils.config import LoggingConfig


def setup_logging(config: LoggingConfig | str | None = None) -> None:
    """Configure the root logger with a standard format.

    Args:
        config: A :class:`LoggingConfig`, a bare level name
            (DEBUG, INFO, WARNING, ERROR, CRITICAL) or ``None`` for defaults.
    """
    if config is None:
        config = LoggingConfig()
    elif isinstance(config, str):
        config = LoggingConfig(level=config)

    numeric_level = getattr(logging, config.level.upper(), logging.INFO)
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            config.format,
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)
