"""Data models shared by discovery, prompt capture and reporting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ResponseOrigin(str, Enum):
    """Where a remembered answer came from."""

    USER = "user"
    DEFAULT = "default"
    PRELOADED = "preloaded"


class OutcomeStatus(str, Enum):
    """Final classification of a target in the summary."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


class TargetState(str, Enum):
    """Lifecycle of one target within a run."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


# No target re-enters PENDING and terminal states have no exits.
# RUNNING -> SKIPPED only happens when the operation itself reports nothing to do.
ALLOWED_TRANSITIONS: dict[TargetState, frozenset[TargetState]] = {
    TargetState.PENDING: frozenset({TargetState.RUNNING, TargetState.SKIPPED}),
    TargetState.RUNNING: frozenset(
        {TargetState.SUCCESS, TargetState.FAILURE, TargetState.SKIPPED}
    ),
    TargetState.SUCCESS: frozenset(),
    TargetState.FAILURE: frozenset(),
    TargetState.SKIPPED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class RepositoryTarget:
    """A directory the operation is run in, named after its last path component."""

    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Path) -> "RepositoryTarget":
        absolute = Path(path).resolve()
        return cls(path=absolute, name=absolute.name)


@dataclass(frozen=True, slots=True)
class PromptResponse:
    """An answer to one prompt, keyed by the exact prompt text."""

    prompt: str
    response: str
    origin: ResponseOrigin = ResponseOrigin.USER


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Result of handling one target; immutable once recorded."""

    target: RepositoryTarget
    status: OutcomeStatus
    exit_code: int | None = None
    reason: str | None = None
    output: tuple[str, ...] = ()

    @classmethod
    def skipped(cls, target: RepositoryTarget, reason: str) -> "RunOutcome":
        return cls(target=target, status=OutcomeStatus.SKIPPED, reason=reason)

    @property
    def state(self) -> TargetState:
        return TargetState(self.status.value)


__all__ = [
    "ALLOWED_TRANSITIONS",
    "OutcomeStatus",
    "PromptResponse",
    "RepositoryTarget",
    "ResponseOrigin",
    "RunOutcome",
    "TargetState",
]
