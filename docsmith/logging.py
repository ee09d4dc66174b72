"""Logger hierarchy and console setup for the docsmith CLI."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional, TextIO

ROOT_LOGGER = "docsmith"
LOG_LEVEL_ENV = "DOCSMITH_LOG_LEVEL"

_CONSOLE_FORMAT = "[docsmith] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_OWNED = "_docsmith_handler"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``docsmith`` or ``docsmith.<component>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{component}" if component else ROOT_LOGGER)


def resolve_level(verbose: bool = False, environ: Mapping[str, str] | None = None) -> int:
    """``--verbose`` wins; otherwise honour DOCSMITH_LOG_LEVEL, defaulting to INFO."""
    if verbose:
        return logging.DEBUG
    env = os.environ if environ is None else environ
    name = env.get(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Attach docsmith's console handler (and a file handler when asked).

    Handlers installed by an earlier call are replaced; handlers added by the
    host application are left alone.
    """
    level = resolve_level(verbose)
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    _attach(logger, console, level)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        # the file always gets debug detail, independent of console verbosity
        logger.setLevel(logging.DEBUG)
        _attach(logger, sink, logging.DEBUG)

    return logger


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    setattr(handler, _OWNED, True)
    logger.addHandler(handler)


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]
