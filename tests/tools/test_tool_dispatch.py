from __future__ import annotations

import pendulum
import pytest
from pydantic import ValidationError

from teammatch.errors import CapExceeded, GuardViolation, InputError, NotFoundError
from teammatch.schemas import IntroDraft, MatchResult, UserRecord
from teammatch.storage import InMemoryUserStore
from teammatch.tools import (
    IntroDrafter,
    MatchingTool,
    ToolDispatcher,
    ToolFailure,
    ToolKind,
    ToolSuccess,
)


def fixed_now() -> pendulum.DateTime:
    return pendulum.datetime(2026, 5, 1, 12, 0, tz="UTC")


def build_dispatcher(**kwargs) -> ToolDispatcher:
    store = InMemoryUserStore(
        [
            UserRecord(user_id="me", name="Morgan", skills=["Python", "Docker"]),
            UserRecord(user_id="u1", name="Ada", skills=["Python", "Docker", "AWS"]),
            UserRecord(user_id="u2", name="Ben", skills=["python"], availability="busy"),
            UserRecord(user_id="u3", name="Cleo", skills=["Java"]),
        ]
    )
    return ToolDispatcher(
        MatchingTool(store),
        IntroDrafter(store, now_provider=fixed_now),
        clock=fixed_now,
        **kwargs,
    )


def test_match_then_draft_to_confirmed_user():
    session = build_dispatcher().open_session("me")

    matched = session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python", "Docker"]})
    drafted = session.dispatch("draft_intro_message", {"to_user_id": "u1"})

    assert isinstance(matched, ToolSuccess)
    assert isinstance(matched.output, MatchResult)
    assert [m.user_id for m in matched.output.matches] == ["u1", "u2"]
    assert isinstance(drafted, ToolSuccess)
    assert isinstance(drafted.output, IntroDraft)
    assert drafted.output.recipient_id == "u1"
    assert drafted.output.sender_name == "Morgan"

    state = session.state
    assert state.tool_calls_made == 2
    assert state.confirmed_match_ids == {"u1", "u2"}
    assert state.draft == drafted.output
    assert [record.tool for record in state.tool_call_log] == [
        "match_users_by_skills",
        "draft_intro_message",
    ]
    assert state.tool_call_log[0].executed_at == fixed_now().to_iso8601_string()


def test_third_dispatch_raises_cap_exceeded():
    session = build_dispatcher().open_session("me")
    session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"]})
    session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Docker"]})

    with pytest.raises(CapExceeded) as exc:
        session.dispatch(ToolKind.MATCH_USERS, {"skills": ["AWS"]})

    assert exc.value.message == "Tool call limit of 2 reached. No further tool calls permitted this turn."
    assert session.state.tool_calls_made == 2
    assert session.state.at_cap
    assert session.state.remaining_calls == 0
    assert len(session.state.tool_call_log) == 2


def test_failed_calls_count_toward_cap():
    session = build_dispatcher().open_session("me")

    first = session.dispatch(ToolKind.MATCH_USERS, {"skills": []})
    second = session.dispatch("search_the_web", {"query": "python"})

    assert isinstance(first, ToolFailure)
    assert isinstance(first.error, InputError)
    assert isinstance(second, ToolFailure)
    assert second.kind is None
    assert second.message == "Unknown tool: search_the_web"
    with pytest.raises(CapExceeded):
        session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"]})


def test_custom_cap():
    session = build_dispatcher(max_tool_calls=1).open_session("me")
    session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"]})

    with pytest.raises(CapExceeded, match="limit of 1"):
        session.dispatch(ToolKind.DRAFT_INTRO, {"to_user_id": "u1"})


def test_draft_to_unmatched_existing_user_is_guarded():
    session = build_dispatcher().open_session("me")
    session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"]})

    result = session.dispatch(ToolKind.DRAFT_INTRO, {"to_user_id": "u3"})

    assert isinstance(result, ToolFailure)
    assert isinstance(result.error, GuardViolation)
    assert result.error.kind == "guard_violation"
    assert "'u3' was not returned by match_users_by_skills" in result.message
    assert session.state.draft is None
    assert result.record.output["error"]["kind"] == "guard_violation"


def test_draft_without_any_match_is_guarded():
    session = build_dispatcher().open_session("me")

    result = session.dispatch(ToolKind.DRAFT_INTRO, {"to_user_id": "u1"})

    assert isinstance(result, ToolFailure)
    assert isinstance(result.error, GuardViolation)
    assert session.state.draft is None


def test_seeded_confirmed_ids_allow_draft():
    session = build_dispatcher().open_session("me", confirmed_match_ids=["u1"])

    result = session.dispatch(ToolKind.DRAFT_INTRO, {"to_user_id": "u1", "custom_note": "Hi!"})

    assert isinstance(result, ToolSuccess)
    assert result.record.input == {"from_user_id": "me", "to_user_id": "u1", "custom_note": "Hi!"}


def test_confirmed_but_unknown_user_is_not_found():
    session = build_dispatcher().open_session("me", confirmed_match_ids=["ghost"])

    result = session.dispatch(ToolKind.DRAFT_INTRO, {"to_user_id": "ghost"})

    assert isinstance(result, ToolFailure)
    assert isinstance(result.error, NotFoundError)


def test_draft_requires_recipient():
    session = build_dispatcher().open_session("me")

    result = session.dispatch(ToolKind.DRAFT_INTRO, {})

    assert isinstance(result, ToolFailure)
    assert result.message == "draft_intro_message: to_user_id is required"


def test_match_input_is_scoped_to_requester():
    session = build_dispatcher().open_session("me", project_id="p9")

    result = session.dispatch(
        ToolKind.MATCH_USERS,
        {"skills": ["Python"], "exclude_user_id": "u1", "availability_filter": "sometimes"},
    )

    assert isinstance(result, ToolSuccess)
    assert result.record.input == {"skills": ["Python"], "limit": 5, "exclude_user_id": "me"}
    assert "me" not in session.state.confirmed_match_ids


def test_match_input_keeps_valid_availability():
    session = build_dispatcher().open_session("me")

    result = session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"], "availability_filter": "busy"})

    assert isinstance(result, ToolSuccess)
    assert [m.user_id for m in result.output.matches] == ["u2"]


def test_draft_uses_session_project():
    session = build_dispatcher().open_session("me", project_id="p9", confirmed_match_ids=["u1"])

    result = session.dispatch(ToolKind.DRAFT_INTRO, {"to_user_id": "u1"})

    assert result.record.input["project_id"] == "p9"


def test_tool_call_records_are_immutable():
    session = build_dispatcher().open_session("me")
    result = session.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"]})

    with pytest.raises(ValidationError):
        result.record.tool = "draft_intro_message"


def test_sessions_do_not_share_state():
    dispatcher = build_dispatcher()
    first = dispatcher.open_session("me")
    first.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"]})
    first.dispatch(ToolKind.MATCH_USERS, {"skills": ["Python"]})

    second = dispatcher.open_session("me")

    assert second.state.tool_calls_made == 0
    assert second.state.confirmed_match_ids == set()
