# src/todo_sync/logging_setup.py

from __future__ import annotations

import logging
import logging.handlers
import re
import sys
from pathlib import Path

PACKAGE = __name__.partition(".")[0]

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


class _AppConsoleFilter(logging.Filter):
    """
    Keep the REPL readable: this package's loggers pass at the handler level,
    anything else (sqlite, dotenv, captured py.warnings) only from WARNING up.
    """

    def __init__(self, package: str = PACKAGE) -> None:
        super().__init__()
        self._package = package

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == self._package or name.startswith(self._package + "."):
            return True
        return record.levelno >= logging.WARNING


def log_file_name(app_name: str) -> str:
    """'My Todo' -> 'My_Todo.log'; falls back to the package name."""
    stem = _UNSAFE_FILENAME.sub("_", app_name.strip()).strip("._") or PACKAGE
    return f"{stem}.log"


def setup_logging(
    *,
    log_dir: str | Path = ".local/todo",
    app_name: str = PACKAGE,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Console handler on stderr (filtered, so it does not interleave with prompts)
    plus a size-rotated file log named after the app. Returns the log file path.
    Call once, before the first log line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_file_name(app_name)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    console.addFilter(_AppConsoleFilter())
    root.addHandler(console)

    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
