# src/tasksphere/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the REPL readable.

    Collection stores and the delete cascade log every change; the console
    already echoes each change as a command reply, so those loggers only
    reach the console at WARNING+. The key-value store "ready" line (with the
    database path) still shows. Everything outside tasksphere needs ERROR+.
    """

    _quiet = frozenset(
        {
            "tasksphere.storage.collection_store",
            "tasksphere.tasks.task_store",
            "tasksphere.projects.project_store",
            "tasksphere.team.team_store",
            "tasksphere.core.integrity",
        }
    )

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name in self._quiet:
            return record.levelno >= logging.WARNING

        if name.startswith("tasksphere."):
            return True

        # includes py.warnings
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasksphere",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Route all records to <log_dir>/tasksphere.log (file_level) and a filtered
    stderr view (console_level). Replaces any handlers already on the root
    logger; call it once from main() before the stores are built.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tasksphere.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
