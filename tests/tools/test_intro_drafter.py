from __future__ import annotations

import pendulum
import pytest

from teammatch.errors import InputError, NotFoundError
from teammatch.schemas import DraftRequest, ProjectRecord, UserRecord
from teammatch.storage import InMemoryUserStore
from teammatch.tools import IntroDrafter


def fixed_now() -> pendulum.DateTime:
    return pendulum.datetime(2026, 3, 14, 9, 30, tz="UTC")


def build_store() -> InMemoryUserStore:
    return InMemoryUserStore(
        users=[
            UserRecord(
                user_id="sender",
                name="Sam",
                bio="Full-stack engineer who ships fast.",
                skills=["React", "Node.js", "AWS", "Docker", "GraphQL", "Figma"],
            ),
            UserRecord(user_id="quiet", name="Quinn"),
            UserRecord(user_id="recipient", name="Riley", skills=["Python"]),
        ],
        projects=[
            ProjectRecord(project_id="p1", title="Atlas", description="x" * 150),
            ProjectRecord(project_id="p2", title="Beacon"),
        ],
    )


def build_drafter() -> IntroDrafter:
    return IntroDrafter(build_store(), now_provider=fixed_now)


def test_draft_without_project():
    draft = build_drafter().run({"from_user_id": "sender", "to_user_id": "recipient"})

    assert draft.subject == "Team Collaboration Invitation from Sam - TeamForge"
    assert draft.body.startswith("Hi Riley,\n\nMy name is Sam and I found your profile on TeamForge.")
    assert "I bring expertise in React, Node.js, AWS, Docker, GraphQL." in draft.body
    assert "Figma" not in draft.body
    assert "Full-stack engineer who ships fast." in draft.body
    assert draft.body.endswith("Best regards,\nSam\n\n--\nSent via TeamForge AI Assistant")
    assert draft.recipient_id == "recipient"
    assert draft.recipient_name == "Riley"
    assert draft.sender_name == "Sam"
    assert draft.project_title is None
    assert draft.generated_at == fixed_now().to_iso8601_string()


def test_draft_with_project_clips_description():
    draft = build_drafter().run(
        DraftRequest(from_user_id="sender", to_user_id="recipient", project_id="p1")
    )

    assert draft.subject == 'Collaboration Invitation: "Atlas" - TeamForge'
    assert draft.project_title == "Atlas"
    assert f'called "Atlas" - {"x" * 100}...' in draft.body
    assert "x" * 101 not in draft.body


def test_draft_with_project_without_description():
    draft = build_drafter().run({"from_user_id": "sender", "to_user_id": "recipient", "project_id": "p2"})

    assert 'I\'m building a project called "Beacon" I noticed' in draft.body


def test_missing_project_is_not_an_error():
    draft = build_drafter().run({"from_user_id": "sender", "to_user_id": "recipient", "project_id": "nope"})

    assert draft.project_title is None
    assert draft.subject.startswith("Team Collaboration Invitation")


def test_sender_without_skills_or_bio():
    draft = build_drafter().run(
        {"from_user_id": "quiet", "to_user_id": "recipient", "custom_note": "Loved your talk at PyCon."}
    )

    assert "I bring expertise in various skills.\n\nLoved your talk at PyCon." in draft.body


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"from_user_id": "ghost", "to_user_id": "recipient"}, "Sender user (ghost) not found"),
        ({"from_user_id": "sender", "to_user_id": "ghost"}, "Recipient user (ghost) not found"),
    ],
)
def test_unresolved_users_raise_not_found(payload: dict, message: str):
    with pytest.raises(NotFoundError) as exc:
        build_drafter().run(payload)
    assert exc.value.message == message
    assert exc.value.kind == "not_found"


def test_missing_ids_raise_input_error():
    with pytest.raises(InputError, match="requires from_user_id and to_user_id"):
        build_drafter().run({"from_user_id": "sender"})


def test_custom_note_over_limit_raises_input_error():
    with pytest.raises(InputError):
        build_drafter().run(
            {"from_user_id": "sender", "to_user_id": "recipient", "custom_note": "n" * 301}
        )
