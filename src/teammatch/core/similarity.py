"""Cosine similarity ranking over binary skill vectors."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import structlog

from ..schemas import CandidateProfile, ScoredMatch
from .vectorizer import build_vocabulary, encode, normalize_skill, normalized_set

SIMILARITY_PRECISION = 4


def cosine(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine of two equal-length vectors; 0.0 when either has zero norm."""
    if len(vec_a) != len(vec_b):
        raise ValueError(f"Vector length mismatch: {len(vec_a)} != {len(vec_b)}")
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for a, b in zip(vec_a, vec_b):
        dot += a * b
        norm_a += a * a
        norm_b += b * b
    denominator = math.sqrt(norm_a * norm_b)
    if denominator == 0:
        return 0.0
    return dot / denominator


def score_pair(query_skills: Sequence[str], user_skills: Sequence[str]) -> float:
    """Similarity of a single user against a query, unrounded."""
    vocabulary = build_vocabulary([query_skills, user_skills])
    return cosine(encode(query_skills, vocabulary), encode(user_skills, vocabulary))


def matched_skills(candidate_skills: Iterable[str], query_tokens: set[str]) -> list[str]:
    """Raw candidate skills whose normalized form appears in the query."""
    return [skill for skill in candidate_skills if normalize_skill(skill) in query_tokens]


def select_top(
    scored: Iterable[tuple[CandidateProfile, float]],
    query_tokens: set[str],
    *,
    top_n: int,
    min_score: float,
) -> list[ScoredMatch]:
    """Filter, order, and truncate ``(candidate, similarity)`` pairs.

    Ordering uses the full-precision similarity, then the matched-skill count,
    then the candidate's skill count, all descending. Full ties keep input
    order.
    """
    rows: list[tuple[float, int, int, CandidateProfile, list[str]]] = []
    for candidate, similarity in scored:
        if similarity < min_score:
            continue
        matched = matched_skills(candidate.skills, query_tokens)
        rows.append((similarity, len(matched), len(candidate.skills), candidate, matched))

    rows.sort(key=lambda row: (row[0], row[1], row[2]), reverse=True)

    return [
        ScoredMatch(
            user_id=candidate.user_id,
            name=candidate.name,
            email=candidate.email,
            bio=candidate.bio,
            skills=list(candidate.skills),
            availability=candidate.availability,
            matched_skills=matched,
            cosine_similarity=min(round(similarity, SIMILARITY_PRECISION), 1.0),
            match_score=match_score,
            total_skills=total_skills,
        )
        for similarity, match_score, total_skills, candidate, matched in rows[: max(top_n, 0)]
    ]


@dataclass
class RankerConfig:
    """Defaults for binary cosine ranking."""

    top_n: int = 3
    min_score: float = 0.1


class SkillRanker:
    """Rank candidates against a query using a per-call shared vocabulary."""

    algorithm = "cosine-binary"

    def __init__(self, *, config: RankerConfig | None = None) -> None:
        self._config = config or RankerConfig()
        self._logger = structlog.get_logger(__name__)

    @property
    def default_min_score(self) -> float:
        return self._config.min_score

    def rank(
        self,
        query_skills: Sequence[str],
        candidates: Sequence[CandidateProfile],
        top_n: int | None = None,
        min_score: float | None = None,
    ) -> list[ScoredMatch]:
        if not query_skills or not candidates:
            return []

        top_n = self._config.top_n if top_n is None else top_n
        min_score = self._config.min_score if min_score is None else min_score

        vocabulary = build_vocabulary([query_skills, *(candidate.skills for candidate in candidates)])
        query_vector = encode(query_skills, vocabulary)
        scored = [
            (candidate, cosine(query_vector, encode(candidate.skills, vocabulary)))
            for candidate in candidates
        ]

        matches = select_top(scored, normalized_set(query_skills), top_n=top_n, min_score=min_score)
        self._logger.debug(
            "ranking.binary",
            vocabulary_size=len(vocabulary),
            candidates=len(candidates),
            returned=len(matches),
        )
        return matches


__all__ = [
    "RankerConfig",
    "SIMILARITY_PRECISION",
    "SkillRanker",
    "cosine",
    "matched_skills",
    "score_pair",
    "select_top",
]
