# src/taskshift/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskshift.log"

# Loggers that run on the alarm thread; their INFO lines would interleave with
# the ">>> " prompt, so the terminal only gets their warnings.
_BACKGROUND_LOGGERS = (
    "taskshift.tasks.alarm_loop",
    "taskshift.storage.kv_store",
)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter for the task prompt.

    taskshift records pass, except the background alarm thread below WARNING.
    Everything else (captured warnings included) needs ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith("taskshift."):
            return record.levelno >= logging.ERROR
        if record.name.startswith(_BACKGROUND_LOGGERS):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskshift",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all records to stderr (filtered) and to <log_dir>/taskshift.log (unfiltered).

    Meant to run once from main(), before the stores are opened. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # warnings.warn(...) arrives as 'py.warnings' and is filtered like third-party code.
    logging.captureWarnings(True)
    return log_file
