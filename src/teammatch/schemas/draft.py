"""Introduction drafting documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MAX_CUSTOM_NOTE_LENGTH = 300


class DraftRequest(BaseModel):
    """Input accepted by ``draft_intro_message``."""

    from_user_id: str = Field(min_length=1)
    to_user_id: str = Field(min_length=1)
    project_id: str | None = None
    custom_note: str | None = Field(default=None, max_length=MAX_CUSTOM_NOTE_LENGTH)

    model_config = ConfigDict(extra="forbid")


class IntroDraft(BaseModel):
    """Advisory introduction message. Never transmitted by the core."""

    subject: str
    body: str
    recipient_id: str
    recipient_name: str
    sender_name: str
    project_title: str | None = None
    generated_at: str

    model_config = ConfigDict(extra="forbid")
