"""Schema for responses files."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class PreloadedResponse(BaseModel):
    """One prompt/answer pair seeded into the response table before the run."""

    prompt: str = Field(..., description="Exact prompt text emitted by the operation.")
    response: str = Field(default="", description="Answer replayed whenever the prompt appears.")

    @field_validator("prompt")
    @classmethod
    def _validate_prompt(cls, value: str) -> str:
        normalized = value.rstrip("\r\n")
        if not normalized.strip():
            raise ValueError("Response prompt must not be empty")
        return normalized

    @field_validator("response", mode="before")
    @classmethod
    def _coerce_response(cls, value: Any) -> str:
        # YAML turns bare yes/no/numbers into non-strings.
        if value is None:
            return ""
        if isinstance(value, bool):
            return "y" if value else "n"
        return str(value)


class ResponseFile(BaseModel):
    responses: list[PreloadedResponse] = Field(default_factory=list)

    @field_validator("responses", mode="before")
    @classmethod
    def _accept_mapping(cls, value: Any):
        if value is None:
            return []
        if isinstance(value, dict):
            return [{"prompt": prompt, "response": response} for prompt, response in value.items()]
        if isinstance(value, (list, tuple)):
            return list(value)
        raise TypeError("responses must be a list of {prompt, response} items or a mapping")


__all__ = ["PreloadedResponse", "ResponseFile"]
