"""Turn-scoped tool dispatch with a hard call cap and the draft-target guard.

Both agents go through :class:`ToolSession`. Every dispatch checks the cap
first, then resolves the tool kind, then (for drafts) verifies that the
recipient was returned by a match earlier in the same session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Literal, Mapping

import pendulum
import structlog

from ..errors import CapExceeded, GuardViolation, InputError, TeamMatchError
from ..schemas import (
    AVAILABILITY_VALUES,
    IntroDraft,
    MatchResult,
    ScoredMatch,
    ToolCallRecord,
)
from .drafting import IntroDrafter
from .matching import MatchingTool

MAX_TOOL_CALLS = 2


class ToolKind(str, Enum):
    """The closed set of tools an agent may invoke."""

    MATCH_USERS = "match_users_by_skills"
    DRAFT_INTRO = "draft_intro_message"

    @classmethod
    def parse(cls, name: str) -> ToolKind | None:
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class ToolSuccess:
    kind: ToolKind
    output: MatchResult | IntroDraft
    record: ToolCallRecord
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class ToolFailure:
    kind: ToolKind | None
    error: TeamMatchError
    record: ToolCallRecord
    ok: Literal[False] = False

    @property
    def message(self) -> str:
        return self.error.message


ToolResult = ToolSuccess | ToolFailure


@dataclass
class AgentState:
    """Mutable state of one agent turn. Never outlives the request."""

    max_tool_calls: int = MAX_TOOL_CALLS
    tool_calls_made: int = 0
    confirmed_match_ids: set[str] = field(default_factory=set)
    draft: IntroDraft | None = None
    awaiting_approval: bool = False
    latest_matches: list[ScoredMatch] | None = None
    tool_call_log: list[ToolCallRecord] = field(default_factory=list)

    @property
    def remaining_calls(self) -> int:
        return max(self.max_tool_calls - self.tool_calls_made, 0)

    @property
    def at_cap(self) -> bool:
        return self.tool_calls_made >= self.max_tool_calls


class ToolSession:
    """Dispatches tools on behalf of one requester for one turn."""

    def __init__(
        self,
        *,
        matching_tool: MatchingTool,
        drafter: IntroDrafter,
        requester_id: str,
        project_id: str | None = None,
        state: AgentState | None = None,
        clock: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._matching_tool = matching_tool
        self._drafter = drafter
        self._requester_id = requester_id
        self._project_id = project_id
        self.state = state or AgentState()
        self._clock = clock or pendulum.now
        self._logger = structlog.get_logger(__name__).bind(requester_id=requester_id)

    def dispatch(self, tool: ToolKind | str, arguments: Mapping[str, Any] | None = None) -> ToolResult:
        """Execute one tool call.

        Raises :class:`CapExceeded` when the turn has used all its calls.
        Tool-level failures (bad input, unknown tool, unresolved user, guard
        violation, upstream failure) are returned as :class:`ToolFailure`.
        """
        if self.state.at_cap:
            self._logger.warning(
                "agent.cap_reached",
                limit=self.state.max_tool_calls,
                tool=getattr(tool, "value", tool),
            )
            raise CapExceeded(self.state.max_tool_calls)
        self.state.tool_calls_made += 1

        arguments = dict(arguments or {})
        kind = tool if isinstance(tool, ToolKind) else ToolKind.parse(tool)
        tool_name = kind.value if kind else str(tool)
        tool_input: dict[str, Any] = arguments

        try:
            if kind is ToolKind.MATCH_USERS:
                tool_input = self._match_input(arguments)
                output: MatchResult | IntroDraft = self._matching_tool.run(tool_input)
            elif kind is ToolKind.DRAFT_INTRO:
                tool_input = self._draft_input(arguments)
                self._check_recipient(tool_input["to_user_id"])
                output = self._drafter.run(tool_input)
            else:
                raise InputError(f"Unknown tool: {tool}")
        except TeamMatchError as exc:
            record = self._record(tool_name, tool_input, {"error": exc.to_dict()})
            self._logger.info("agent.tool_failed", tool=tool_name, kind=exc.kind, error=exc.message)
            return ToolFailure(kind=kind, error=exc, record=record)

        record = self._record(tool_name, tool_input, output.model_dump(mode="json"))
        self._absorb(output)
        self._logger.info(
            "agent.tool_dispatched",
            tool=tool_name,
            call_number=self.state.tool_calls_made,
        )
        return ToolSuccess(kind=kind, output=output, record=record)

    def _match_input(self, arguments: dict[str, Any]) -> dict[str, Any]:
        tool_input: dict[str, Any] = {
            "skills": arguments.get("skills"),
            "limit": arguments.get("limit") if arguments.get("limit") is not None else 5,
            "exclude_user_id": self._requester_id,
        }
        availability = arguments.get("availability_filter")
        if isinstance(availability, str) and availability in AVAILABILITY_VALUES:
            tool_input["availability_filter"] = availability
        if arguments.get("use_embeddings"):
            tool_input["use_embeddings"] = True
        if not isinstance(tool_input["skills"], list) or not tool_input["skills"]:
            raise InputError("match_users_by_skills: skills must be a non-empty array")
        return tool_input

    def _draft_input(self, arguments: dict[str, Any]) -> dict[str, Any]:
        to_user_id = arguments.get("to_user_id")
        if not isinstance(to_user_id, str) or not to_user_id:
            raise InputError("draft_intro_message: to_user_id is required")
        tool_input: dict[str, Any] = {
            "from_user_id": self._requester_id,
            "to_user_id": to_user_id,
        }
        project_id = arguments.get("project_id") or self._project_id
        if project_id:
            tool_input["project_id"] = project_id
        custom_note = arguments.get("custom_note")
        if custom_note:
            tool_input["custom_note"] = custom_note
        return tool_input

    def _check_recipient(self, recipient_id: str) -> None:
        if recipient_id not in self.state.confirmed_match_ids:
            self._logger.warning("agent.guard_violation", recipient_id=recipient_id)
            raise GuardViolation(recipient_id, self.state.confirmed_match_ids)

    def _absorb(self, output: MatchResult | IntroDraft) -> None:
        if isinstance(output, MatchResult):
            self.state.confirmed_match_ids.update(match.user_id for match in output.matches)
            self.state.latest_matches = list(output.matches)
        else:
            self.state.draft = output

    def _record(self, tool: str, tool_input: Mapping[str, Any], output: dict[str, Any]) -> ToolCallRecord:
        record = ToolCallRecord(
            tool=tool,
            input=dict(tool_input),
            output=output,
            executed_at=self._clock().to_iso8601_string(),
        )
        self.state.tool_call_log.append(record)
        return record


class ToolDispatcher:
    """Factory for turn-scoped :class:`ToolSession` objects."""

    def __init__(
        self,
        matching_tool: MatchingTool,
        drafter: IntroDrafter,
        *,
        max_tool_calls: int = MAX_TOOL_CALLS,
        clock: Callable[[], pendulum.DateTime] | None = None,
    ) -> None:
        self._matching_tool = matching_tool
        self._drafter = drafter
        self._max_tool_calls = max_tool_calls
        self._clock = clock

    @property
    def max_tool_calls(self) -> int:
        return self._max_tool_calls

    @property
    def embeddings_enabled(self) -> bool:
        return self._matching_tool.embeddings_enabled

    def open_session(
        self,
        requester_id: str,
        *,
        project_id: str | None = None,
        confirmed_match_ids: Iterable[str] = (),
    ) -> ToolSession:
        """Start a turn, seeding ids confirmed by a previous turn's matches."""
        state = AgentState(
            max_tool_calls=self._max_tool_calls,
            confirmed_match_ids=set(confirmed_match_ids),
        )
        return ToolSession(
            matching_tool=self._matching_tool,
            drafter=self._drafter,
            requester_id=requester_id,
            project_id=project_id,
            state=state,
            clock=self._clock,
        )


__all__ = [
    "AgentState",
    "MAX_TOOL_CALLS",
    "ToolDispatcher",
    "ToolFailure",
    "ToolKind",
    "ToolResult",
    "ToolSession",
    "ToolSuccess",
]
