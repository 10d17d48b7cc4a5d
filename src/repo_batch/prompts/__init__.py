"""Prompt capture and replay."""

from .providers import CachingInputProvider, InputProvider, TerminalInputProvider, normalize_prompt
from .table import ResponseTable

__all__ = [
    "CachingInputProvider",
    "InputProvider",
    "ResponseTable",
    "TerminalInputProvider",
    "normalize_prompt",
]
