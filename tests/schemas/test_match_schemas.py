from __future__ import annotations

import pytest
from pydantic import ValidationError

from teammatch.errors import CapExceeded, GuardViolation, InputError, TeamMatchError
from teammatch.schemas import (
    AgentRequest,
    AgentResponse,
    CandidateFilter,
    DraftRequest,
    MatchRequest,
    ScoredMatch,
    UserRecord,
)


def test_user_record_defaults_and_candidate_projection():
    user = UserRecord.model_validate({"user_id": "u1", "name": "Ada", "passwordHash": "x"})

    candidate = user.to_candidate()

    assert user.availability == "available"
    assert user.skills == []
    assert candidate.user_id == "u1"
    assert not hasattr(candidate, "passwordHash")


def test_match_request_defaults():
    request = MatchRequest(skills=["Go"])

    assert request.limit == 5
    assert request.use_embeddings is False
    assert request.availability_filter is None


@pytest.mark.parametrize(
    "payload",
    [
        {"skills": []},
        {"skills": ["x"] * 11},
        {"skills": ["Go"], "limit": 0},
        {"skills": ["Go"], "limit": 11},
        {"skills": ["Go"], "unexpected": True},
    ],
)
def test_match_request_rejects_invalid(payload: dict):
    with pytest.raises(ValidationError):
        MatchRequest.model_validate(payload)


def test_scored_match_similarity_bounds():
    with pytest.raises(ValidationError):
        ScoredMatch(user_id="u1", name="Ada", cosine_similarity=1.2)
    with pytest.raises(ValidationError):
        ScoredMatch(user_id="u1", name="Ada", cosine_similarity=-0.1)


def test_draft_request_note_limit():
    DraftRequest(from_user_id="a", to_user_id="b", custom_note="n" * 300)
    with pytest.raises(ValidationError):
        DraftRequest(from_user_id="a", to_user_id="b", custom_note="n" * 301)


def test_candidate_filter_limit_must_be_positive():
    with pytest.raises(ValidationError):
        CandidateFilter(skills=["Go"], limit=0)


def test_agent_request_requires_user_id():
    with pytest.raises(ValidationError):
        AgentRequest(message="hi", user_id="")


def test_agent_response_serializes_with_snake_case_fields():
    response = AgentResponse(success=True, reasoning="ok", tool_calls_made=0)

    dumped = response.model_dump(mode="json")

    assert dumped["tool_calls_made"] == 0
    assert dumped["awaiting_approval"] is False
    assert dumped["matches"] is None


def test_error_taxonomy():
    guard = GuardViolation("u9", {"u2", "u1"})
    cap = CapExceeded(2)

    assert isinstance(InputError("bad"), ValueError)
    assert isinstance(guard, TeamMatchError)
    assert guard.to_dict() == {
        "kind": "guard_violation",
        "message": guard.message,
        "details": {"recipient_id": "u9", "confirmed_ids": ["u1", "u2"]},
    }
    assert cap.to_dict()["details"] == {"limit": 2}
