"""Aggregate run outcomes into a summary."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .models import OutcomeStatus, RunOutcome

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIGURATION = 2


@dataclass(slots=True)
class BatchReport:
    total: int
    successes: list[RunOutcome] = field(default_factory=list)
    failures: list[RunOutcome] = field(default_factory=list)
    skipped: list[RunOutcome] = field(default_factory=list)

    @property
    def accounted(self) -> int:
        return len(self.successes) + len(self.failures) + len(self.skipped)

    @property
    def consistent(self) -> bool:
        return self.accounted == self.total

    @property
    def exit_code(self) -> int:
        return EXIT_FAILURES if self.failures else EXIT_OK


def build_report(outcomes: Iterable[RunOutcome], total: int) -> BatchReport:
    """Group outcomes by status and check that every target is accounted for.

    A count mismatch is logged loudly but never raised; a degraded report is
    still returned.
    """

    report = BatchReport(total=total)
    buckets = {
        OutcomeStatus.SUCCESS: report.successes,
        OutcomeStatus.FAILURE: report.failures,
        OutcomeStatus.SKIPPED: report.skipped,
    }
    for outcome in outcomes:
        buckets[outcome.status].append(outcome)

    if not report.consistent:
        logger.warning(
            "Outcome count mismatch: success + failure + skipped != total",
            extra={
                "total": report.total,
                "accounted": report.accounted,
                "success": len(report.successes),
                "failure": len(report.failures),
                "skipped": len(report.skipped),
            },
        )
    return report


def render_report(report: BatchReport) -> list[str]:
    lines = [
        "Summary:",
        f"  Total targets: {report.total}",
        f"  Succeeded: {len(report.successes)}",
    ]
    lines.extend(f"    - {outcome.target.name}" for outcome in report.successes)

    lines.append(f"  Failed: {len(report.failures)}")
    for outcome in report.failures:
        detail = f"exit code {outcome.exit_code}" if outcome.exit_code is not None else "no exit code"
        if outcome.reason:
            detail = f"{detail}, {outcome.reason}"
        lines.append(f"    - {outcome.target.name} ({detail})")

    lines.append(f"  Skipped: {len(report.skipped)}")
    lines.extend(
        f"    - {outcome.target.name} ({outcome.reason or 'no reason given'})"
        for outcome in report.skipped
    )

    if not report.consistent:
        lines.append(
            f"  WARNING: count mismatch, {report.accounted} outcomes recorded for {report.total} targets"
        )
    return lines


__all__ = [
    "BatchReport",
    "EXIT_CONFIGURATION",
    "EXIT_FAILURES",
    "EXIT_OK",
    "build_report",
    "render_report",
]
