"""Tools available to the agents."""

from __future__ import annotations

from .dispatch import (
    MAX_TOOL_CALLS,
    AgentState,
    ToolDispatcher,
    ToolFailure,
    ToolKind,
    ToolResult,
    ToolSession,
    ToolSuccess,
)
from .drafting import IntroDrafter
from .matching import MatchingConfig, MatchingTool

__all__ = [
    "AgentState",
    "IntroDrafter",
    "MAX_TOOL_CALLS",
    "MatchingConfig",
    "MatchingTool",
    "ToolDispatcher",
    "ToolFailure",
    "ToolKind",
    "ToolResult",
    "ToolSession",
    "ToolSuccess",
]
