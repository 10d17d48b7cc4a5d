"""Operation invocation and output capture."""

from .runner import OperationResult, OperationRunner, parse_ask_line
from .utils import sanitize_environment, working_directory

__all__ = [
    "OperationResult",
    "OperationRunner",
    "parse_ask_line",
    "sanitize_environment",
    "working_directory",
]
