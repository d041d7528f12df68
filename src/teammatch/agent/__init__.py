"""Agents orchestrating the matching and drafting tools."""

from __future__ import annotations

from .bounded import (
    KNOWN_SKILLS,
    AgentPhase,
    BoundedAgent,
    BoundedAgentConfig,
    extract_skills_from_message,
)
from .llm_agent import LLMAgent, LLMAgentConfig
from .parsing import parse_or_default

__all__ = [
    "AgentPhase",
    "BoundedAgent",
    "BoundedAgentConfig",
    "KNOWN_SKILLS",
    "LLMAgent",
    "LLMAgentConfig",
    "extract_skills_from_message",
    "parse_or_default",
]
