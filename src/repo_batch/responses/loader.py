"""Load preloaded responses from YAML."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ResponseLoadError
from ..models import PromptResponse, ResponseOrigin
from .models import ResponseFile


class ResponseLoader:
    """Reads a responses file and converts it into table entries."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[PromptResponse]:
        """Return the responses in file order.

        Duplicate prompts are kept; the response table applies first-wins.
        """

        if not self._path.is_file():
            raise ResponseLoadError(f"Responses file not found: {self._path}")

        try:
            document = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ResponseLoadError(f"Failed to parse YAML in {self._path}: {exc}") from exc

        if document is None:
            return []

        try:
            parsed = ResponseFile.model_validate(document)
        except ValidationError as exc:
            raise ResponseLoadError(f"Responses validation error in {self._path}: {exc}") from exc

        return [
            PromptResponse(prompt=item.prompt, response=item.response, origin=ResponseOrigin.PRELOADED)
            for item in parsed.responses
        ]


def load_responses(path: Path) -> list[PromptResponse]:
    """Convenience wrapper for loading responses from ``path``."""

    return ResponseLoader(path).load()


__all__ = ["ResponseLoader", "load_responses"]
