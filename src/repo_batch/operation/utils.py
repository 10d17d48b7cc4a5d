"""Helpers for launching operations."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping

_SANITIZED_VARS = {
    "PYTHONHOME",
    "PYTHONPATH",
    "VIRTUAL_ENV",
    "PIP_RESPECT_VIRTUALENV",
}


def sanitize_environment(additional: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return a sanitized environment suitable for subprocess execution."""

    env = dict(os.environ)
    for key in _SANITIZED_VARS:
        env.pop(key, None)
    if additional:
        env.update(additional)
    return env


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Change into ``path`` for the duration of the block, restoring on every exit path."""

    original = Path.cwd()
    os.chdir(path)
    try:
        yield Path(path)
    finally:
        os.chdir(original)


__all__ = ["sanitize_environment", "working_directory"]
