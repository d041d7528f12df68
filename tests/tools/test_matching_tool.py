from __future__ import annotations

from typing import Sequence

import pytest

from teammatch.core import EmbeddingRanker
from teammatch.core.embedding import EmbeddingRankerConfig
from teammatch.errors import InputError
from teammatch.schemas import CandidateFilter, CandidateProfile, MatchRequest, UserRecord
from teammatch.storage import InMemoryUserStore
from teammatch.tools import MatchingTool


def build_store() -> InMemoryUserStore:
    return InMemoryUserStore(
        [
            UserRecord(user_id="me", name="Requester", skills=["React", "Node.js"]),
            UserRecord(user_id="u1", name="Alice", skills=["React", "TypeScript"]),
            UserRecord(user_id="u2", name="Bruno", skills=["React", "Node.js", "MongoDB"]),
            UserRecord(user_id="u3", name="Chen", skills=["Python"], availability="busy"),
            UserRecord(user_id="u4", name="Dana", skills=["React Native"], availability="part-time"),
        ]
    )


class RecordingStore(InMemoryUserStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.filters: list[CandidateFilter] = []

    def find_candidates(self, candidate_filter: CandidateFilter) -> list[CandidateProfile]:
        self.filters.append(candidate_filter)
        return super().find_candidates(candidate_filter)


class KeywordEmbeddingProvider:
    def embed(self, text: str) -> Sequence[float]:
        lowered = text.lower()
        return [
            1.0 if "react" in lowered else 0.0,
            1.0 if "node" in lowered else 0.0,
            1.0 if "python" in lowered else 0.0,
        ]


def test_run_ranks_candidates_and_excludes_requester():
    tool = MatchingTool(build_store())

    result = tool.run({"skills": ["React", "Node.js"], "exclude_user_id": "me"})

    assert result.algorithm == "cosine-binary"
    assert result.searched_skills == ["React", "Node.js"]
    assert [m.user_id for m in result.matches] == ["u2", "u1"]
    assert result.total_found == 2
    assert result.matches[0].matched_skills == ["React", "Node.js"]


def test_run_accepts_model_request():
    tool = MatchingTool(build_store())

    result = tool.run(MatchRequest(skills=["Python"], availability_filter="busy"))

    assert [m.user_id for m in result.matches] == ["u3"]


def test_run_filters_by_availability():
    tool = MatchingTool(build_store())

    result = tool.run({"skills": ["React"], "availability_filter": "part-time"})

    # "React Native" is retrieved by substring but shares no normalized skill.
    assert result.matches == []
    assert result.total_found == 0


@pytest.mark.parametrize(
    "payload",
    [
        {"skills": []},
        {},
        {"skills": [f"s{idx}" for idx in range(11)]},
        {"skills": ["React"], "limit": 11},
        {"skills": ["React"], "limit": 0},
        {"skills": ["React"], "availability_filter": "on-leave"},
    ],
)
def test_run_rejects_invalid_input(payload: dict):
    tool = MatchingTool(build_store())

    with pytest.raises(InputError) as exc:
        tool.run(payload)
    assert exc.value.kind == "input_error"


def test_empty_skills_error_message():
    with pytest.raises(InputError, match="at least one skill"):
        MatchingTool(build_store()).run({"skills": []})


def test_no_overlap_returns_empty_binary_result():
    tool = MatchingTool(build_store())

    result = tool.run({"skills": ["Haskell"], "use_embeddings": True})

    assert result.matches == []
    assert result.algorithm == "cosine-binary"


@pytest.mark.parametrize(("limit", "expected"), [(1, 5), (2, 10), (10, 50)])
def test_prefilter_limit_scales_with_requested_limit(limit: int, expected: int):
    store = RecordingStore(
        [UserRecord(user_id=f"u{idx}", name=f"User {idx}", skills=["Go"]) for idx in range(60)]
    )
    tool = MatchingTool(store)

    result = tool.run({"skills": ["Go"], "limit": limit})

    assert store.filters[0].limit == expected
    assert len(result.matches) == limit


def test_use_embeddings_without_ranker_falls_back_to_binary():
    tool = MatchingTool(build_store())

    result = tool.run({"skills": ["React"], "use_embeddings": True})

    assert not tool.embeddings_enabled
    assert result.algorithm == "cosine-binary"


def test_use_embeddings_with_ranker():
    ranker = EmbeddingRanker(KeywordEmbeddingProvider(), config=EmbeddingRankerConfig(dimensions=3))
    tool = MatchingTool(build_store(), embedding_ranker=ranker)

    result = tool.run({"skills": ["React", "Node.js"], "use_embeddings": True, "exclude_user_id": "me"})

    assert tool.embeddings_enabled
    assert result.algorithm == "cosine-embedding"
    assert result.matches[0].user_id == "u2"
    assert result.matches[0].cosine_similarity == 1.0
    assert all(m.cosine_similarity >= 0.3 for m in result.matches)
