"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class RankingSection(BaseModel):
    min_score: float | None = Field(default=None, ge=0.0, le=1.0)

    model_config = ConfigDict(extra="forbid")


class EmbeddingSection(BaseModel):
    model: str | None = None
    dimensions: int | None = Field(default=None, ge=1)
    cache_size: int | None = Field(default=None, ge=1)
    eviction: Literal["fifo", "lru"] | None = None
    concurrency: int | None = Field(default=None, ge=1)
    min_score: float | None = Field(default=None, ge=0.0, le=1.0)

    model_config = ConfigDict(extra="forbid")


class MatchingSection(BaseModel):
    prefilter_multiplier: int | None = Field(default=None, ge=1)
    prefilter_cap: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")


class AgentSection(BaseModel):
    match_limit: int | None = Field(default=None, ge=1, le=10)
    use_embeddings: bool | None = None

    model_config = ConfigDict(extra="forbid")


class LLMSection(BaseModel):
    model: str | None = None
    timeout: float | None = Field(default=None, gt=0)
    max_turns: int | None = Field(default=None, ge=1, le=2)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)
    summary_temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    summary_max_tokens: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    ranking: RankingSection = Field(default_factory=RankingSection)
    embedding: EmbeddingSection = Field(default_factory=EmbeddingSection)
    matching: MatchingSection = Field(default_factory=MatchingSection)
    agent: AgentSection = Field(default_factory=AgentSection)
    llm: LLMSection = Field(default_factory=LLMSection)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, dict[str, Any]]:
        """Non-empty sections with only the keys that were set."""
        settings: dict[str, dict[str, Any]] = {}
        for name in ("ranking", "embedding", "matching", "agent", "llm"):
            section = getattr(self, name).model_dump(exclude_none=True)
            if section:
                settings[name] = section
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise TypeError("Config must be a mapping")
    return AppConfig.model_validate(raw)
