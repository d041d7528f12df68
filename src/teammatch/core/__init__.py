"""Skill vectorization and similarity ranking."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..schemas import CandidateProfile, ScoredMatch

# NOTE: keep imports explicit for export clarity.
from .embedding import (
    EmbeddingCache,
    EmbeddingProvider,
    EmbeddingRanker,
    EmbeddingRankerConfig,
    cache_key,
)
from .similarity import RankerConfig, SkillRanker, cosine, score_pair
from .vectorizer import build_vocabulary, encode, normalize_skill


@runtime_checkable
class Ranker(Protocol):
    """Ranking contract shared by the binary and embedding rankers."""

    algorithm: str

    @property
    def default_min_score(self) -> float:
        """Threshold applied when the caller does not pass one."""

    def rank(
        self,
        query_skills: Sequence[str],
        candidates: Sequence[CandidateProfile],
        top_n: int | None = None,
        min_score: float | None = None,
    ) -> list[ScoredMatch]:
        """Return candidates ordered by similarity to the query."""


__all__ = [
    "EmbeddingCache",
    "EmbeddingProvider",
    "EmbeddingRanker",
    "EmbeddingRankerConfig",
    "Ranker",
    "RankerConfig",
    "SkillRanker",
    "build_vocabulary",
    "cache_key",
    "cosine",
    "encode",
    "normalize_skill",
    "score_pair",
]
