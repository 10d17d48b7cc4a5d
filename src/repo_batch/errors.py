"""Exception hierarchy for repo-batch."""

from __future__ import annotations


class BatchError(RuntimeError):
    """Base class for batch runner errors."""


class ConfigurationError(BatchError):
    """Raised when the run cannot start (bad operation, bad root, bad input file)."""


class OperationNotFoundError(ConfigurationError):
    """Raised when the operation executable cannot be located."""


class OperationNotExecutableError(ConfigurationError):
    """Raised when the operation exists but cannot be executed."""


class ResponseLoadError(ConfigurationError):
    """Raised when a preloaded responses file cannot be parsed."""


class InvalidTransitionError(BatchError):
    """Raised when a target is moved through an illegal state transition."""


class DuplicateOutcomeError(BatchError):
    """Raised when a second outcome is recorded for the same target."""


__all__ = [
    "BatchError",
    "ConfigurationError",
    "DuplicateOutcomeError",
    "InvalidTransitionError",
    "OperationNotExecutableError",
    "OperationNotFoundError",
    "ResponseLoadError",
]
