"""Agent whose tool choice and arguments come from a chat model.

The model may ask for any number of tool calls, but everything goes through
the same :class:`~teammatch.tools.ToolSession` as the rule-based agent, so
the call cap and the draft-target guard hold regardless of what the model
proposes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

import structlog

from ..errors import CapExceeded, TeamMatchError
from ..llm import ChatModel, ToolCallRequest
from ..schemas import AgentRequest, AgentResponse
from ..tools import ToolDispatcher, ToolSession, ToolSuccess
from .parsing import AgentSummary, parse_model_or_default, parse_or_default
from .prompts import SUMMARY_INSTRUCTION, SYSTEM_PROMPT, TOOL_DEFINITIONS


@dataclass
class LLMAgentConfig:
    """Completion parameters for the tool loop and the closing summary."""

    max_turns: int = 2
    temperature: float = 0.2
    max_tokens: int = 1500
    summary_temperature: float = 0.1
    summary_max_tokens: int = 1200


class LLMAgent:
    """Tool-calling loop over a :class:`ChatModel`."""

    def __init__(
        self,
        dispatcher: ToolDispatcher,
        model: ChatModel,
        *,
        config: LLMAgentConfig | None = None,
        system_prompt: str = SYSTEM_PROMPT,
        tools: Sequence[dict[str, Any]] = TOOL_DEFINITIONS,
    ) -> None:
        self._dispatcher = dispatcher
        self._model = model
        self._config = config or LLMAgentConfig()
        self._system_prompt = system_prompt
        self._tools = list(tools)
        self._logger = structlog.get_logger(__name__)

    def run(self, request: AgentRequest) -> AgentResponse:
        session = self._dispatcher.open_session(
            request.user_id,
            project_id=request.project_id,
            confirmed_match_ids=request.confirmed_match_ids,
        )
        messages = self._initial_messages(request)

        try:
            self._tool_loop(session, messages)
            summary_reply = self._model.complete(
                [*messages, {"role": "user", "content": SUMMARY_INSTRUCTION}],
                temperature=self._config.summary_temperature,
                max_tokens=self._config.summary_max_tokens,
            )
        except TeamMatchError as exc:
            self._logger.warning("agent.failed", kind=exc.kind, error=exc.message)
            state = session.state
            return AgentResponse(
                success=False,
                reasoning="An error occurred during agent execution.",
                tool_calls_made=state.tool_calls_made,
                matches=state.latest_matches,
                draft_message=None,
                awaiting_approval=False,
                confirmed_match_ids=sorted(state.confirmed_match_ids),
                tool_call_log=list(state.tool_call_log),
                error=exc.message,
                error_kind=exc.kind,
            )

        summary = parse_model_or_default(summary_reply.content, AgentSummary)
        state = session.state
        can_approve = bool(state.latest_matches) and state.draft is None
        if summary.awaiting_approval is None:
            state.awaiting_approval = can_approve
        else:
            state.awaiting_approval = summary.awaiting_approval and can_approve

        return AgentResponse(
            success=True,
            reasoning=summary.reasoning or "Agent completed.",
            tool_calls_made=state.tool_calls_made,
            matches=state.latest_matches,
            draft_message=state.draft,
            awaiting_approval=state.awaiting_approval,
            approval_prompt=summary.approval_prompt,
            confirmed_match_ids=sorted(state.confirmed_match_ids),
            tool_call_log=list(state.tool_call_log),
        )

    def _initial_messages(self, request: AgentRequest) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = [{"role": "system", "content": self._system_prompt}]
        if request.confirmed_match_ids:
            messages.append(
                {
                    "role": "system",
                    "content": "User ids returned by match_users_by_skills earlier in this conversation: "
                    + ", ".join(request.confirmed_match_ids),
                }
            )
        content = request.message
        if request.approved_recipient_id:
            content = (
                f"{content}\n\nI approve drafting an introduction to user id {request.approved_recipient_id}."
            ).strip()
        messages.append({"role": "user", "content": content})
        return messages

    def _tool_loop(self, session: ToolSession, messages: list[dict[str, Any]]) -> None:
        state = session.state
        for turn in range(self._config.max_turns):
            if state.at_cap:
                break

            reply = self._model.complete(
                messages,
                tools=self._tools,
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
            )
            messages.append(reply.to_message())

            if not reply.tool_calls:
                break

            for call in reply.function_calls:
                messages.append(self._execute(session, call, turn))

    def _execute(self, session: ToolSession, call: ToolCallRequest, turn: int) -> dict[str, Any]:
        if session.state.at_cap:
            return _tool_message(call.id, {"error": CapExceeded(session.state.max_tool_calls).message})

        arguments = parse_or_default(call.arguments, {})
        try:
            result = session.dispatch(call.name, arguments)
        except CapExceeded as exc:
            return _tool_message(call.id, {"error": exc.message})

        self._logger.info("agent.llm_tool_call", turn=turn, tool=call.name, ok=result.ok)
        if isinstance(result, ToolSuccess):
            return _tool_message(call.id, result.output.model_dump(mode="json"))
        return _tool_message(call.id, {"error": result.message})


def _tool_message(tool_call_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "role": "tool",
        "tool_call_id": tool_call_id,
        "content": json.dumps(payload, ensure_ascii=False),
    }


__all__ = ["LLMAgent", "LLMAgentConfig"]
