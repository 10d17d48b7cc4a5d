"""In-memory table of remembered prompt answers."""

from __future__ import annotations

from typing import Iterable, Iterator

from ..models import PromptResponse, ResponseOrigin


class ResponseTable:
    """Answers keyed by the exact prompt text, scoped to one batch run."""

    def __init__(self, entries: Iterable[PromptResponse] | None = None) -> None:
        self._entries: dict[str, PromptResponse] = {}
        for entry in entries or []:
            self.remember(entry.prompt, entry.response, origin=entry.origin)

    def lookup(self, prompt: str) -> PromptResponse | None:
        return self._entries.get(prompt)

    def remember(
        self,
        prompt: str,
        response: str,
        *,
        origin: ResponseOrigin = ResponseOrigin.USER,
        overwrite: bool = False,
    ) -> bool:
        """Store an answer. The first answer for a prompt wins unless ``overwrite`` is set.

        Returns ``True`` when the table changed.
        """

        if prompt in self._entries and not overwrite:
            return False
        self._entries[prompt] = PromptResponse(prompt=prompt, response=response, origin=origin)
        return True

    def __contains__(self, prompt: object) -> bool:
        return prompt in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PromptResponse]:
        return iter(list(self._entries.values()))


__all__ = ["ResponseTable"]
