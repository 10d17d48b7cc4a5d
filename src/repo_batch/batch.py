"""Sequential batch loop over discovered repositories."""

from __future__ import annotations

import logging

from .discovery import DiscoveryResult
from .models import OutcomeStatus, RepositoryTarget, RunOutcome, TargetState
from .operation import OperationRunner
from .prompts import InputProvider
from .report import BatchReport, build_report, render_report
from .session import BatchSession

logger = logging.getLogger(__name__)

INTERRUPTED = "interrupted"
NOT_RUN_INTERRUPTED = "not run (interrupted)"


class BatchRunner:
    """Run one operation over every target of a discovery, one target at a time."""

    def __init__(self, operation: OperationRunner, provider: InputProvider) -> None:
        self._operation = operation
        self._provider = provider

    def run(self, session: BatchSession, discovery: DiscoveryResult) -> BatchReport:
        transcript = session.transcript
        transcript.marker(f"Running {self._operation.executable}")
        transcript.marker(f"Looking for repositories in {discovery.root} ({session.target_mode})")
        if transcript.log_file is not None:
            transcript.marker(f"Logging to {transcript.log_file}")

        for skipped in discovery.skipped:
            session.record(skipped)
            transcript.marker(f"Skipping {skipped.target.name}: {skipped.reason}")

        total = len(discovery.targets)
        interrupted = False
        for index, target in enumerate(discovery.targets, start=1):
            if interrupted:
                session.record(RunOutcome.skipped(target, NOT_RUN_INTERRUPTED))
                continue
            try:
                transcript.marker(f"processing target {index}/{total}: {target.name}")
                outcome = self._process(session, target)
                interrupted = outcome.reason == INTERRUPTED
                transcript.marker(self._describe(outcome))
            except KeyboardInterrupt:
                # Interrupted outside the running operation (spawn, logging).
                interrupted = True
                self._record_interrupted(session, target)

        report = build_report(session.outcomes, discovery.total)
        for line in render_report(report):
            transcript.output(line)
        if not report.consistent:
            transcript.warning("outcome counts do not add up to the number of targets")
        return report

    def _process(self, session: BatchSession, target: RepositoryTarget) -> RunOutcome:
        session.transition(target, TargetState.RUNNING)
        try:
            result = self._operation.run(target, self._provider, session.transcript)
        except OSError as exc:
            logger.error("Operation could not be started", extra={"target": target.name, "error": str(exc)})
            return session.record(
                RunOutcome(target=target, status=OutcomeStatus.FAILURE, reason=str(exc))
            )
        except Exception as exc:
            logger.exception("Operation crashed the runner", extra={"target": target.name})
            return session.record(
                RunOutcome(
                    target=target,
                    status=OutcomeStatus.FAILURE,
                    reason=f"{type(exc).__name__}: {exc}",
                )
            )

        if result.interrupted:
            return session.record(
                RunOutcome(
                    target=target,
                    status=OutcomeStatus.FAILURE,
                    exit_code=result.returncode,
                    reason=INTERRUPTED,
                    output=result.output,
                )
            )

        if result.ok and result.skip_reason is not None:
            return session.record(
                RunOutcome(
                    target=target,
                    status=OutcomeStatus.SKIPPED,
                    exit_code=result.returncode,
                    reason=result.skip_reason,
                    output=result.output,
                )
            )

        status = OutcomeStatus.SUCCESS if result.ok else OutcomeStatus.FAILURE
        return session.record(
            RunOutcome(target=target, status=status, exit_code=result.returncode, output=result.output)
        )

    @staticmethod
    def _record_interrupted(session: BatchSession, target: RepositoryTarget) -> None:
        state = session.state_of(target)
        if state is TargetState.PENDING:
            session.transition(target, TargetState.RUNNING)
        elif state is not TargetState.RUNNING:
            return
        session.record(RunOutcome(target=target, status=OutcomeStatus.FAILURE, reason=INTERRUPTED))
        session.transcript.warning(f"{target.name}: interrupted")

    @staticmethod
    def _describe(outcome: RunOutcome) -> str:
        name = outcome.target.name
        if outcome.status is OutcomeStatus.SUCCESS:
            return f"{name}: success"
        if outcome.status is OutcomeStatus.SKIPPED:
            return f"{name}: skipped ({outcome.reason})"
        if outcome.reason == INTERRUPTED:
            return f"{name}: interrupted"
        return f"{name}: failed (exit code {outcome.exit_code})"


__all__ = ["BatchRunner", "INTERRUPTED", "NOT_RUN_INTERRUPTED"]
