"""Skill-based teammate matching with a bounded tool-calling agent."""

__version__ = "0.1.0"
