"""Logging setup shared by the extraction tiers."""

from __future__ import annotations

import inspect
import logging
import os
import reprlib
from collections.abc import Callable
from functools import wraps
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, ParamSpec

TRACE_LEVEL = 5  # below DEBUG; selected with LOG_LEVEL=TRACE
logging.addLevelName(TRACE_LEVEL, "TRACE")

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(module)s | %(funcName)s | %(message)s"
LOG_DIR_ENV = "PDFSALVAGE_LOG_DIR"


def _resolve_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    if level_name == "TRACE":
        return TRACE_LEVEL
    return getattr(logging, level_name, logging.INFO)


def setup_logging(force: bool = False) -> None:
    """Configure handlers/formatters once (unless force=True).

    A console handler is always installed. Daily rotating files
    (``pdfsalvage.log`` and ``pdfsalvage-debug.log``) are only written when
    ``PDFSALVAGE_LOG_DIR`` points somewhere.
    """
    if getattr(setup_logging, "_configured", False) and not force:
        return
    root = logging.getLogger()
    if force:  # pragma: no cover
        for h in list(root.handlers):
            root.removeHandler(h)
    level = _resolve_level()
    root.setLevel(level)
    fmt = logging.Formatter(DEFAULT_FORMAT)

    log_dir_value = os.getenv(LOG_DIR_ENV)
    if log_dir_value:
        log_dir = Path(log_dir_value)
        log_dir.mkdir(parents=True, exist_ok=True)
        info_handler = TimedRotatingFileHandler(
            log_dir / "pdfsalvage.log",
            when="midnight",
            backupCount=7,
            encoding="utf-8",
        )
        info_handler.setFormatter(fmt)
        info_handler.setLevel(logging.INFO)
        debug_handler = TimedRotatingFileHandler(
            log_dir / "pdfsalvage-debug.log",
            when="midnight",
            backupCount=7,
            encoding="utf-8",
        )
        debug_handler.setFormatter(fmt)
        debug_handler.setLevel(TRACE_LEVEL)
        root.addHandler(info_handler)
        root.addHandler(debug_handler)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.setLevel(level)
    root.addHandler(console)
    setup_logging._configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    """Return a module logger.

    Configuration is left to the embedding application (or an explicit
    :func:`setup_logging` call); library modules never install handlers on
    import.
    """
    return logging.getLogger(name)


P = ParamSpec("P")


def log_call(
    level: int = logging.DEBUG,
) -> Callable[[Callable[P, Any]], Callable[P, Any]]:
    """Log entry, exit and failures of a sync or async callable.

    Arguments and results are shortened to a bounded repr so document
    bytes never end up in the log verbatim.
    """

    def _decorator(fn: Callable[P, Any]) -> Callable[P, Any]:
        logger = get_logger(fn.__module__)
        name = fn.__qualname__

        def enter(args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
            if logger.isEnabledFor(level):
                logger.log(level, "call_enter fn=%s args=%s kwargs=%s", name, _shorten(args), _shorten(kwargs))

        def leave(result: Any) -> Any:
            if logger.isEnabledFor(level):
                logger.log(level, "call_exit fn=%s result=%s", name, _shorten(result))
            return result

        def failed(e: Exception) -> None:
            logger.debug("call_error fn=%s error=%r", name, e)

        if inspect.iscoroutinefunction(fn):

            @wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                enter(args, kwargs)
                try:
                    result = await fn(*args, **kwargs)
                except Exception as e:
                    failed(e)
                    raise
                return leave(result)

            return async_wrapper

        @wraps(fn)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
            enter(args, kwargs)
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                failed(e)
                raise
            return leave(result)

        return sync_wrapper

    return _decorator


_REPR = reprlib.Repr()
_REPR.maxstring = 80
_REPR.maxother = 80


def _shorten(obj: object, limit: int = 120) -> str:
    """Bounded repr for log lines; never raises."""
    try:
        s = _REPR.repr(obj)
    except Exception:  # noqa: BLE001
        return type(obj).__name__
    return s if len(s) <= limit else s[: limit - 3] + "..."
