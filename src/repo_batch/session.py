"""State owned by a single batch run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .discovery import TargetMode
from .errors import DuplicateOutcomeError, InvalidTransitionError
from .models import ALLOWED_TRANSITIONS, RepositoryTarget, RunOutcome, TargetState
from .prompts import ResponseTable
from .transcript import Transcript


@dataclass(slots=True)
class BatchSession:
    """Outcomes, remembered answers and options for one invocation of the runner.

    Nothing here outlives the process apart from the transcript's log file.
    """

    root: Path
    transcript: Transcript
    auto_respond: bool = False
    target_mode: TargetMode = "current"
    responses: ResponseTable = field(default_factory=ResponseTable)
    outcomes: list[RunOutcome] = field(default_factory=list)
    _states: dict[Path, TargetState] = field(default_factory=dict)

    def state_of(self, target: RepositoryTarget) -> TargetState:
        return self._states.get(target.path, TargetState.PENDING)

    def transition(self, target: RepositoryTarget, new_state: TargetState) -> None:
        current = self.state_of(target)
        if new_state not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"{target.name}: cannot move from {current.value} to {new_state.value}"
            )
        self._states[target.path] = new_state

    def record(self, outcome: RunOutcome) -> RunOutcome:
        """Store the final outcome for a target, moving it into its terminal state."""

        if any(existing.target.path == outcome.target.path for existing in self.outcomes):
            raise DuplicateOutcomeError(f"Outcome already recorded for {outcome.target.name}")
        self.transition(outcome.target, outcome.state)
        self.outcomes.append(outcome)
        return outcome


__all__ = ["BatchSession"]
