"""Deterministic, rule-based agent driving the two tools under a hard cap."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import cast

import structlog

from ..errors import TeamMatchError
from ..schemas import AgentRequest, AgentResponse, IntroDraft, MatchResult
from ..tools import AgentState, ToolDispatcher, ToolFailure, ToolKind, ToolSession

KNOWN_SKILLS: tuple[str, ...] = (
    "react", "react native", "node", "nodejs", "express", "typescript", "javascript",
    "python", "django", "flask", "fastapi", "mongodb", "postgresql", "mysql", "redis",
    "docker", "kubernetes", "aws", "gcp", "azure", "graphql", "rest", "figma",
    "flutter", "swift", "kotlin", "java", "c++", "rust", "go", "vue", "angular",
    "svelte", "next", "nextjs", "tailwind", "css", "html", "ui", "ux", "devops",
    "machine learning", "ml", "ai", "data science", "tensorflow", "pytorch",
)


class AgentPhase(str, Enum):
    IDLE = "idle"
    MATCHED_AWAITING_APPROVAL = "matched_awaiting_approval"
    DRAFTED = "drafted"
    FAILED = "failed"


def extract_skills_from_message(message: str, vocabulary: tuple[str, ...] = KNOWN_SKILLS) -> list[str]:
    """Known skills occurring in ``message``, in vocabulary order.

    Plain case-insensitive substring test, so ``"go"`` also fires inside
    words such as ``"mongo"``.
    """
    lowered = message.lower()
    return [skill for skill in vocabulary if skill in lowered]


def build_reasoning(message: str, skills: list[str]) -> str:
    if not skills:
        return (
            f'I analyzed your request: "{message}". I couldn\'t detect specific skills to search for. '
            'Please mention skills like "React developer" or "Python engineer".'
        )
    return (
        f"I analyzed your request and identified these skills to match: [{', '.join(skills)}]. "
        "I will now search for people with these skills, ranked by how closely their skills "
        "align with the request."
    )


def build_approval_prompt(skills: list[str], result: MatchResult) -> str:
    top = result.matches[0]
    return (
        f"I found {len(result.matches)} candidate(s) for [{', '.join(skills)}]. "
        f"The best match is {top.name} (matched {top.match_score} skill(s): "
        f"{', '.join(top.matched_skills)}). "
        f"Would you like me to draft an introduction message to {top.name}? "
        f"(Reply with their user id, {top.user_id}, to approve)"
    )


@dataclass
class BoundedAgentConfig:
    """Tool arguments used by the rule-based flow."""

    match_limit: int = 5
    use_embeddings: bool = False


class BoundedAgent:
    """Rule-based orchestrator.

    Turn N matches and stops at the approval gate; turn N+1 carries the
    approved id (plus the ids turn N confirmed) and drafts. Skill extraction
    is not a tool call.
    """

    def __init__(self, dispatcher: ToolDispatcher, *, config: BoundedAgentConfig | None = None) -> None:
        self._dispatcher = dispatcher
        self._config = config or BoundedAgentConfig()
        self._logger = structlog.get_logger(__name__)

    def run(self, request: AgentRequest, *, session: ToolSession | None = None) -> AgentResponse:
        session = session or self._dispatcher.open_session(
            request.user_id,
            project_id=request.project_id,
            confirmed_match_ids=request.confirmed_match_ids,
        )
        try:
            if request.approved_recipient_id:
                return self._draft(request, session)
            return self._match(request, session)
        except TeamMatchError as exc:
            self._logger.warning("agent.failed", kind=exc.kind, error=exc.message)
            return _failure(
                session.state,
                "An error occurred during agent execution.",
                exc,
            )

    def _draft(self, request: AgentRequest, session: ToolSession) -> AgentResponse:
        reasoning = (
            "You approved sending an introduction to this user. "
            "I will now draft a professional intro message on your behalf."
        )
        result = session.dispatch(
            ToolKind.DRAFT_INTRO,
            {
                "to_user_id": request.approved_recipient_id,
                "project_id": request.project_id,
                "custom_note": request.custom_note,
            },
        )
        if isinstance(result, ToolFailure):
            return _failure(session.state, reasoning, result.error)

        draft = cast(IntroDraft, result.output)
        self._logger.info("agent.phase", phase=AgentPhase.DRAFTED.value, recipient_id=draft.recipient_id)
        return _response(session.state, success=True, reasoning=reasoning, draft_message=draft)

    def _match(self, request: AgentRequest, session: ToolSession) -> AgentResponse:
        skills = extract_skills_from_message(request.message)
        reasoning = build_reasoning(request.message, skills)

        if not skills:
            self._logger.info("agent.phase", phase=AgentPhase.FAILED.value, reason="no_skills")
            return _response(
                session.state,
                success=False,
                reasoning=reasoning,
                error="No recognizable skills found in your message.",
                error_kind="input_error",
            )

        arguments: dict[str, object] = {"skills": skills, "limit": self._config.match_limit}
        if self._config.use_embeddings:
            arguments["use_embeddings"] = True
        result = session.dispatch(ToolKind.MATCH_USERS, arguments)
        if isinstance(result, ToolFailure):
            return _failure(session.state, reasoning, result.error)

        match_result = cast(MatchResult, result.output)
        if not match_result.matches:
            return _response(
                session.state,
                success=True,
                reasoning=reasoning + " However, no users were found matching these skills.",
                matches=[],
            )

        session.state.awaiting_approval = True
        self._logger.info(
            "agent.phase",
            phase=AgentPhase.MATCHED_AWAITING_APPROVAL.value,
            matches=len(match_result.matches),
        )
        return _response(
            session.state,
            success=True,
            reasoning=reasoning,
            matches=match_result.matches,
            approval_prompt=build_approval_prompt(skills, match_result),
        )


def _response(state: AgentState, *, success: bool, reasoning: str, **fields: object) -> AgentResponse:
    return AgentResponse(
        success=success,
        reasoning=reasoning,
        tool_calls_made=state.tool_calls_made,
        awaiting_approval=state.awaiting_approval,
        confirmed_match_ids=sorted(state.confirmed_match_ids),
        tool_call_log=list(state.tool_call_log),
        **fields,
    )


def _failure(state: AgentState, reasoning: str, error: TeamMatchError) -> AgentResponse:
    state.awaiting_approval = False
    return _response(
        state,
        success=False,
        reasoning=reasoning,
        matches=state.latest_matches,
        error=error.message,
        error_kind=error.kind,
    )


__all__ = [
    "AgentPhase",
    "BoundedAgent",
    "BoundedAgentConfig",
    "KNOWN_SKILLS",
    "build_approval_prompt",
    "build_reasoning",
    "extract_skills_from_message",
]
