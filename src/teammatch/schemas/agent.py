"""Agent request/response and audit records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .draft import IntroDraft
from .match import ScoredMatch


class ToolCallRecord(BaseModel):
    """Immutable audit entry for one dispatched tool call."""

    tool: str
    input: dict[str, Any] = Field(default_factory=dict)
    output: dict[str, Any] = Field(default_factory=dict)
    executed_at: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class AgentRequest(BaseModel):
    """One conversation turn submitted to an agent.

    ``approved_recipient_id`` is set when the requester approved a candidate
    from a previous turn; ``confirmed_match_ids`` must then carry the ids that
    turn returned so the draft target can be verified.
    """

    message: str = ""
    user_id: str = Field(min_length=1)
    project_id: str | None = None
    approved_recipient_id: str | None = None
    confirmed_match_ids: list[str] = Field(default_factory=list)
    custom_note: str | None = None

    model_config = ConfigDict(extra="forbid")


class AgentResponse(BaseModel):
    """Structured result of one agent turn."""

    success: bool
    reasoning: str
    tool_calls_made: int = Field(ge=0)
    matches: list[ScoredMatch] | None = None
    draft_message: IntroDraft | None = None
    awaiting_approval: bool = False
    approval_prompt: str | None = None
    confirmed_match_ids: list[str] = Field(default_factory=list)
    tool_call_log: list[ToolCallRecord] = Field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None

    model_config = ConfigDict(extra="forbid")
