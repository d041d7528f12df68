"""Matching tool input and output documents."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .profile import Availability

Algorithm = Literal["cosine-binary", "cosine-embedding"]

MAX_QUERY_SKILLS = 10
MAX_MATCH_LIMIT = 10


class ScoredMatch(BaseModel):
    """Candidate profile annotated with its similarity to the query."""

    user_id: str
    name: str
    email: str = ""
    bio: str = ""
    skills: list[str] = Field(default_factory=list)
    availability: Availability = "available"
    matched_skills: list[str] = Field(default_factory=list)
    cosine_similarity: float = Field(ge=0.0, le=1.0)
    match_score: int = 0
    total_skills: int = 0

    model_config = ConfigDict(extra="forbid")


class MatchRequest(BaseModel):
    """Input accepted by ``match_users_by_skills``."""

    skills: list[str] = Field(min_length=1, max_length=MAX_QUERY_SKILLS)
    limit: int = Field(default=5, ge=1, le=MAX_MATCH_LIMIT)
    exclude_user_id: str | None = None
    availability_filter: Availability | None = None
    use_embeddings: bool = False

    model_config = ConfigDict(extra="forbid")


class MatchResult(BaseModel):
    """Output of ``match_users_by_skills``."""

    matches: list[ScoredMatch] = Field(default_factory=list)
    searched_skills: list[str] = Field(default_factory=list)
    total_found: int = 0
    algorithm: Algorithm = "cosine-binary"

    model_config = ConfigDict(extra="forbid")
