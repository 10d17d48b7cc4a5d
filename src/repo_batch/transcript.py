"""Line-oriented run transcript written to the console and a log file."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

LOG_FILE_PREFIX = "repo_batch_"


def log_file_name(now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{LOG_FILE_PREFIX}{stamp}.log"


class Transcript:
    """Mirror operation output and progress markers to console and log file.

    Records are flushed as they are written so a crash mid-run still leaves a
    readable partial log.
    """

    def __init__(self, console: TextIO | None = None, log_file: Path | None = None) -> None:
        # Private logger; not registered with the logging manager.
        self._logger = logging.Logger("repo_batch.transcript", level=logging.INFO)
        self._logger.propagate = False
        self._log_file = Path(log_file) if log_file is not None else None

        console_handler = logging.StreamHandler(console if console is not None else sys.stdout)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        self._logger.addHandler(console_handler)

        if self._log_file is not None:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self._log_file, mode="a", encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("[%(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
            )
            self._logger.addHandler(file_handler)

    @classmethod
    def for_run(
        cls,
        log_dir: Path | None,
        *,
        console: TextIO | None = None,
        now: datetime | None = None,
    ) -> "Transcript":
        """Create a transcript with a timestamped log file under ``log_dir``."""

        log_file = Path(log_dir) / log_file_name(now) if log_dir is not None else None
        return cls(console=console, log_file=log_file)

    @property
    def log_file(self) -> Path | None:
        return self._log_file

    def output(self, line: str) -> None:
        """Record one line produced by the operation."""

        self._logger.info(line.rstrip("\r\n"))

    def marker(self, message: str) -> None:
        """Record a runner-level progress marker."""

        self._logger.info("==> %s", message)

    def warning(self, message: str) -> None:
        self._logger.warning("!!! %s", message)

    def close(self) -> None:
        for handler in list(self._logger.handlers):
            handler.flush()
            if isinstance(handler, logging.FileHandler):
                handler.close()
            self._logger.removeHandler(handler)

    def __enter__(self) -> "Transcript":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["LOG_FILE_PREFIX", "Transcript", "log_file_name"]
