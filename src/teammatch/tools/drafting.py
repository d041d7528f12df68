"""``draft_intro_message``: deterministic introduction templating."""

from __future__ import annotations

from typing import Any, Callable, Mapping

import pendulum
import structlog
from pydantic import ValidationError

from ..errors import InputError, NotFoundError
from ..schemas import DraftRequest, IntroDraft, ProjectRecord, UserRecord
from ..storage import UserStore

PLATFORM_NAME = "TeamForge"
SENDER_SKILL_LIMIT = 5
PROJECT_DESCRIPTION_PREVIEW = 100


class IntroDrafter:
    """Builds an advisory intro message from two resolved users.

    The only side effects are store reads; the draft is returned to the
    caller and never sent.
    """

    name = "draft_intro_message"

    def __init__(
        self,
        store: UserStore,
        *,
        now_provider: Callable[[], pendulum.DateTime] | None = None,
        platform_name: str = PLATFORM_NAME,
    ) -> None:
        self._store = store
        self._now_provider = now_provider or pendulum.now
        self._platform = platform_name
        self._logger = structlog.get_logger(__name__)

    def run(self, request: DraftRequest | Mapping[str, Any]) -> IntroDraft:
        draft_request = self.parse_request(request)

        sender = self._store.find_user(draft_request.from_user_id)
        if sender is None:
            raise NotFoundError(
                f"Sender user ({draft_request.from_user_id}) not found",
                details={"user_id": draft_request.from_user_id},
            )
        recipient = self._store.find_user(draft_request.to_user_id)
        if recipient is None:
            raise NotFoundError(
                f"Recipient user ({draft_request.to_user_id}) not found",
                details={"user_id": draft_request.to_user_id},
            )

        project = self._store.find_project(draft_request.project_id) if draft_request.project_id else None
        if draft_request.project_id and project is None:
            self._logger.info("drafting.project_missing", project_id=draft_request.project_id)

        draft = IntroDraft(
            subject=self._subject(sender, project),
            body=self._body(sender, recipient, project, draft_request.custom_note),
            recipient_id=recipient.user_id,
            recipient_name=recipient.name,
            sender_name=sender.name,
            project_title=project.title if project else None,
            generated_at=self._now_provider().to_iso8601_string(),
        )
        self._logger.info(
            "drafting.generated",
            sender_id=sender.user_id,
            recipient_id=recipient.user_id,
            project_id=project.project_id if project else None,
        )
        return draft

    @staticmethod
    def parse_request(request: DraftRequest | Mapping[str, Any]) -> DraftRequest:
        if isinstance(request, DraftRequest):
            return request
        if not request.get("from_user_id") or not request.get("to_user_id"):
            raise InputError("draft_intro_message requires from_user_id and to_user_id")
        try:
            return DraftRequest.model_validate(dict(request))
        except ValidationError as exc:
            raise InputError(
                f"draft_intro_message: invalid input ({exc.error_count()} error(s))",
                details={"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc

    def _subject(self, sender: UserRecord, project: ProjectRecord | None) -> str:
        if project:
            return f'Collaboration Invitation: "{project.title}" - {self._platform}'
        return f"Team Collaboration Invitation from {sender.name} - {self._platform}"

    def _body(
        self,
        sender: UserRecord,
        recipient: UserRecord,
        project: ProjectRecord | None,
        custom_note: str | None,
    ) -> str:
        skills = ", ".join(sender.skills[:SENDER_SKILL_LIMIT]) if sender.skills else "various skills"

        project_context = ""
        if project:
            project_context = f'I\'m building a project called "{project.title}"'
            if project.description:
                project_context += f" - {project.description[:PROJECT_DESCRIPTION_PREVIEW]}..."
            project_context += " "

        bio = f"\n\n{sender.bio}" if sender.bio else ""
        note = f"\n\n{custom_note}" if custom_note else ""

        body = (
            f"Hi {recipient.name},\n\n"
            f"My name is {sender.name} and I found your profile on {self._platform}. "
            f"{project_context}I noticed your skills align well with what we're looking for, "
            "and I'd love to explore the possibility of collaborating.\n\n"
            f"A bit about me: I bring expertise in {skills}.{bio}{note}\n\n"
            "I believe your background could be a great addition to our team. "
            "Would you be open to a quick chat to discuss further?\n\n"
            "Looking forward to hearing from you!\n\n"
            f"Best regards,\n{sender.name}\n\n"
            "--\n"
            f"Sent via {self._platform} AI Assistant"
        )
        return body.strip()
