"""Input providers that resolve operation prompts to answers."""

from __future__ import annotations

import logging
import sys
from typing import Protocol, TextIO

from ..models import PromptResponse, ResponseOrigin
from ..transcript import Transcript
from .table import ResponseTable

logger = logging.getLogger(__name__)

_AFFIRMATIVE = {"y", "yes"}
REMEMBER_QUESTION = "Remember this answer for the remaining repositories in this run? (y/n)"


class InputProvider(Protocol):
    def resolve(self, prompt: str, default: str | None = None) -> str:
        ...


def normalize_prompt(prompt: str) -> str:
    """Return the cache key for a prompt: the exact text minus line terminators."""

    return prompt.rstrip("\r\n")


class TerminalInputProvider:
    """Reads answers from a live terminal (or any pair of text streams)."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin
        self._stdout = stdout

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def _read_line(self, text: str) -> str:
        self.stdout.write(text)
        self.stdout.flush()
        # EOF reads as an empty answer.
        return self.stdin.readline().rstrip("\r\n")

    def ask(self, prompt: str, default: str | None = None) -> PromptResponse:
        suffix = f" [{default}] " if default else " "
        line = self._read_line(f"{prompt}{suffix}")
        if not line and default:
            return PromptResponse(prompt=prompt, response=default, origin=ResponseOrigin.DEFAULT)
        return PromptResponse(prompt=prompt, response=line, origin=ResponseOrigin.USER)

    def resolve(self, prompt: str, default: str | None = None) -> str:
        return self.ask(prompt, default).response

    def confirm(self, question: str) -> bool:
        answer = self._read_line(f"{question} ")
        return answer.strip().lower() in _AFFIRMATIVE


class CachingInputProvider:
    """Answers from the response table first, falling back to the terminal.

    With ``auto_respond`` every fresh answer is remembered silently; otherwise
    the operator is asked whether to keep it for later targets.
    """

    def __init__(
        self,
        terminal: TerminalInputProvider,
        table: ResponseTable,
        *,
        auto_respond: bool = False,
        transcript: Transcript | None = None,
    ) -> None:
        self._terminal = terminal
        self._table = table
        self._auto_respond = auto_respond
        self._transcript = transcript

    @property
    def table(self) -> ResponseTable:
        return self._table

    def resolve(self, prompt: str, default: str | None = None) -> str:
        key = normalize_prompt(prompt)

        cached = self._table.lookup(key)
        if cached is not None:
            self._note(f"using cached response for {key}")
            return cached.response

        answer = self._terminal.ask(key, default)
        if self._auto_respond or self._terminal.confirm(REMEMBER_QUESTION):
            self._table.remember(key, answer.response, origin=answer.origin)
            logger.debug("Remembered response", extra={"prompt": key, "origin": answer.origin.value})
        return answer.response

    def _note(self, message: str) -> None:
        if self._transcript is not None:
            self._transcript.marker(message)
        else:
            logger.info(message)


__all__ = [
    "CachingInputProvider",
    "InputProvider",
    "REMEMBER_QUESTION",
    "TerminalInputProvider",
    "normalize_prompt",
]
