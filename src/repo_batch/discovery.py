"""Locate the repositories a batch run will process."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .errors import ConfigurationError
from .models import RepositoryTarget, RunOutcome

TargetMode = Literal["current", "parent"]
TARGET_MODES: tuple[str, ...] = ("current", "parent")
NOT_A_REPOSITORY = "not a repository"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DiscoveryResult:
    root: Path
    targets: list[RepositoryTarget] = field(default_factory=list)
    skipped: list[RunOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.targets) + len(self.skipped)


def resolve_root(mode: str, *, cwd: Path | None = None, root: Path | None = None) -> Path:
    """Return the directory whose children are scanned.

    An explicit ``root`` wins over ``mode``; a relative ``root`` is taken
    relative to ``cwd`` when one is given. Raises ``ConfigurationError`` when
    the mode is unknown or the resulting path is not an existing directory.
    """

    if mode not in TARGET_MODES:
        raise ConfigurationError(
            f"Unknown target directory mode '{mode}' (expected one of {', '.join(TARGET_MODES)})"
        )

    if root is not None:
        candidate = Path(root).expanduser()
        if not candidate.is_absolute() and cwd is not None:
            candidate = Path(cwd) / candidate
    else:
        base = Path(cwd) if cwd is not None else Path.cwd()
        candidate = base.parent if mode == "parent" else base

    candidate = candidate.resolve()
    if not candidate.exists():
        raise ConfigurationError(f"Root directory not found: {candidate}")
    if not candidate.is_dir():
        raise ConfigurationError(f"Root is not a directory: {candidate}")
    return candidate


def discover_targets(root: Path, *, marker: str = ".git") -> DiscoveryResult:
    """Split the immediate subdirectories of ``root`` into targets and skips.

    Hidden directories are ignored. Children are visited in name order so the
    result is stable for one filesystem snapshot.
    """

    root = Path(root)
    if not root.is_dir():
        raise ConfigurationError(f"Root is not a directory: {root}")

    result = DiscoveryResult(root=root.resolve())
    for entry in sorted(root.iterdir(), key=lambda path: path.name):
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        target = RepositoryTarget.from_path(entry)
        if (entry / marker).is_dir():
            result.targets.append(target)
        else:
            result.skipped.append(RunOutcome.skipped(target, NOT_A_REPOSITORY))

    logger.debug(
        "Discovery finished",
        extra={
            "root": str(result.root),
            "repositories": len(result.targets),
            "skipped": len(result.skipped),
        },
    )
    return result


__all__ = [
    "DiscoveryResult",
    "NOT_A_REPOSITORY",
    "TARGET_MODES",
    "TargetMode",
    "discover_targets",
    "resolve_root",
]
