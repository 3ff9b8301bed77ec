"""Logging setup for the render CLI and host applications.

Library modules (data_pipeline, renderer) only create module loggers and
emit DEBUG diagnostics. Handlers are installed once by the entry point:

    from uvwire.utils import logging_config
    logging_config.setup_logging("INFO", context={"app": "render"})
    with logging_config.log_context(input="body_uv.csv"):
        ...

Line formats:
    human  2026-10-19T13:45:12.345Z | INFO     | app=render input=body_uv.csv | Wrote uvmap.png
    json   {"t": "2026-10-19T13:45:12.345+00:00", "lvl": "INFO", "name": "...", "pid": 4242,
            "msg": "Wrote uvmap.png", "app": "render", "input": "body_uv.csv"}

Context fields live in a contextvar, so renders running in separate threads
keep their own input name. setup_logging() swaps out the handlers it
installed earlier instead of stacking new ones.
"""

import contextlib
import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

_context_var: contextvars.ContextVar = contextvars.ContextVar('uvwire_log_context', default={})

# Handlers owned by setup_logging(); anything else on the root logger is left alone
_installed_handlers: List[logging.Handler] = []

_FORMAT_MODES = ("human", "json")

_LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Render records as human lines or JSON objects, context fields included.

    Parameters
    ----------
    mode : str
        "human" or "json"
    color : bool
        ANSI level colors in human mode; ignored unless stderr is a TTY

    Raises
    ------
    ValueError
        If mode is unknown
    """

    def __init__(self, mode: str = "human", color: bool = False):
        super().__init__()
        if mode not in _FORMAT_MODES:
            raise ValueError(f"Unknown format mode '{mode}', expected one of {_FORMAT_MODES}")
        self.mode = mode
        self.color = color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        context = _context_var.get()

        if self.mode == "json":
            payload = {
                't': ts.isoformat(timespec='milliseconds'),
                'lvl': record.levelname,
                'name': record.name,
                'pid': os.getpid(),
                'msg': record.getMessage(),
                **context,
            }
            if record.exc_info:
                payload['exc'] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)

        level = f"{record.levelname:8s}"
        if self.color:
            level = f"{_LEVEL_COLORS.get(record.levelno, '')}{level}{_RESET}"

        fields = [f"{ts:%Y-%m-%dT%H:%M:%S}.{ts.microsecond // 1000:03d}Z", level]
        if context:
            fields.append(' '.join(f"{k}={v}" for k, v in context.items()))
        fields.append(record.getMessage())

        line = ' | '.join(fields)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _file_handler(
    log_file: str,
    rotate: Optional[Dict[str, Any]],
    json_lines: bool
) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    if not rotate:
        handler = logging.FileHandler(path, encoding='utf-8')
    elif rotate.get('mode', 'size') == 'size':
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=rotate.get('max_bytes', 5_000_000),
            backupCount=rotate.get('backup_count', 3),
            encoding='utf-8'
        )
    elif rotate['mode'] == 'time':
        handler = logging.handlers.TimedRotatingFileHandler(
            path,
            when=rotate.get('when', 'midnight'),
            backupCount=rotate.get('backup_count', 7),
            encoding='utf-8',
            utc=True
        )
    else:
        raise ValueError(f"Unknown rotation mode '{rotate['mode']}', expected 'size' or 'time'")

    handler.setFormatter(ContextFormatter("json" if json_lines else "human"))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    capture_warnings: bool = True,
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Install console/file handlers on the root logger.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL" (any case)
    log_file : str, optional
        Also log to this file (parent directories are created)
    json : bool
        JSON lines in the log file; the console is always human-readable
    color : bool
        ANSI level colors on the console
    to_stderr : bool
        Log to stderr
    rotate : dict, optional
        {"mode": "size", "max_bytes": 5_000_000, "backup_count": 3} or
        {"mode": "time", "when": "midnight", "backup_count": 7}
    capture_warnings : bool
        Route Python warnings into logging
    quiet_libs : list of str, optional
        Loggers raised to WARNING (e.g. ["PIL"])
    context : dict, optional
        Fields added to every record (e.g. {"app": "render"})

    Returns
    -------
    dict
        {"handlers": [...], "level": "INFO"}

    Raises
    ------
    ValueError
        If log_level or the rotation mode is unknown; no handler is changed
    """
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    handlers: List[logging.Handler] = []
    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", color=color))
        handlers.append(console)
    if log_file:
        handlers.append(_file_handler(log_file, rotate, json))

    root = logging.getLogger()
    for old in _installed_handlers:
        root.removeHandler(old)
        old.close()
    _installed_handlers[:] = handlers
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

    if context:
        push_context(**context)
    for lib in quiet_libs or []:
        logging.getLogger(lib).setLevel(logging.WARNING)
    if capture_warnings:
        route_warnings()

    return {'handlers': list(handlers), 'level': logging.getLevelName(level)}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ============================================================================
# CONTEXT FIELDS
# ============================================================================

def push_context(**fields) -> None:
    """Add fields to every subsequent record in this context."""
    _context_var.set({**_context_var.get(), **fields})


@contextlib.contextmanager
def log_context(**fields) -> Iterator[None]:
    """Add fields for the duration of a block, then restore the previous set.

    Examples
    --------
    >>> with log_context(input="body_uv.csv"):
    ...     logger.info("Parsed 300 points")  # → "... | app=render input=body_uv.csv | Parsed ..."
    """
    token = _context_var.set({**_context_var.get(), **fields})
    try:
        yield
    finally:
        _context_var.reset(token)


# ============================================================================
# PROCESS HOOKS
# ============================================================================

def install_excepthook() -> None:
    """Log uncaught exceptions (Ctrl+C excluded) as CRITICAL."""
    def log_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.getLogger(__name__).critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = log_exception


def route_warnings() -> None:
    logging.captureWarnings(True)
    logging.getLogger('py.warnings').setLevel(logging.WARNING)


def shutdown() -> None:
    """Flush and close all handlers; call once at the end of main()."""
    logging.shutdown()
