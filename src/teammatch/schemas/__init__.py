"""Pydantic schema definitions shared across the matching core."""

from __future__ import annotations

from .agent import AgentRequest, AgentResponse, ToolCallRecord
from .draft import DraftRequest, IntroDraft
from .match import MatchRequest, MatchResult, ScoredMatch
from .profile import (
    AVAILABILITY_VALUES,
    Availability,
    CandidateFilter,
    CandidateProfile,
    ProjectRecord,
    UserRecord,
)

__all__ = [
    "AVAILABILITY_VALUES",
    "AgentRequest",
    "AgentResponse",
    "Availability",
    "CandidateFilter",
    "CandidateProfile",
    "DraftRequest",
    "IntroDraft",
    "MatchRequest",
    "MatchResult",
    "ProjectRecord",
    "ScoredMatch",
    "ToolCallRecord",
    "UserRecord",
]
