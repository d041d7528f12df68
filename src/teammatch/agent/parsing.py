"""Total parsing helpers for model output."""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_or_default(raw: str | bytes | None, default: T) -> T:
    """Decode JSON ``raw``; return ``default`` on any failure.

    The decoded value must also have the same type as ``default`` (a JSON
    array where an object is expected counts as malformed).
    """
    if not raw:
        return default
    try:
        parsed: Any = json.loads(raw)
    except (TypeError, ValueError):
        return default
    if default is not None and not isinstance(parsed, type(default)):
        return default
    return parsed


def parse_model_or_default(raw: str | bytes | None, model: type[ModelT]) -> ModelT:
    """Validate a JSON object into ``model``; fall back to ``model()``."""
    payload = parse_or_default(raw, {})
    try:
        return model.model_validate(payload)
    except ValidationError:
        return model()


class AgentSummary(BaseModel):
    """Fields read from the model's closing JSON summary."""

    reasoning: str | None = None
    awaiting_approval: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("awaiting_approval", "awaitingApproval"),
    )
    approval_prompt: str | None = Field(
        default=None,
        validation_alias=AliasChoices("approval_prompt", "approvalPrompt"),
    )

    model_config = ConfigDict(extra="ignore")


__all__ = ["AgentSummary", "parse_model_or_default", "parse_or_default"]
