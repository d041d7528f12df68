"""Error taxonomy shared by the ranking engine, tools, and agents."""

from __future__ import annotations

from typing import Any


class TeamMatchError(Exception):
    """Base class for errors surfaced to callers of the matching core."""

    kind = "error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": self.details}


class InputError(TeamMatchError, ValueError):
    """Raised for empty/oversized skill lists or missing required ids."""

    kind = "input_error"


class NotFoundError(TeamMatchError, LookupError):
    """Raised when a user id does not resolve through the store."""

    kind = "not_found"


class GuardViolation(TeamMatchError):
    """Raised when a draft targets a user not returned by matching this turn."""

    kind = "guard_violation"

    def __init__(self, recipient_id: str, confirmed_ids: set[str] | frozenset[str]):
        super().__init__(
            f"draft_intro_message: to_user_id {recipient_id!r} was not returned by "
            "match_users_by_skills. Cannot draft a message to an unverified user.",
            details={"recipient_id": recipient_id, "confirmed_ids": sorted(confirmed_ids)},
        )
        self.recipient_id = recipient_id


class CapExceeded(TeamMatchError):
    """Raised when a tool dispatch would exceed the per-turn call cap."""

    kind = "cap_exceeded"

    def __init__(self, limit: int):
        super().__init__(
            f"Tool call limit of {limit} reached. No further tool calls permitted this turn.",
            details={"limit": limit},
        )
        self.limit = limit


class UpstreamError(TeamMatchError):
    """Raised when the embedding provider (or another upstream) fails."""

    kind = "upstream_error"

    def __init__(self, message: str, *, cause: BaseException | None = None):
        details = {"cause": str(cause)} if cause is not None else {}
        super().__init__(message, details=details)
        self.cause = cause


class StoreLoadError(TeamMatchError):
    """Raised when store loading encounters invalid records."""

    kind = "store_load_error"

    def __init__(self, errors: list[str], partial: Any):
        super().__init__("Store loading failed", details={"errors": errors})
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Store loading failed: {self.errors}"


__all__ = [
    "TeamMatchError",
    "InputError",
    "NotFoundError",
    "GuardViolation",
    "CapExceeded",
    "UpstreamError",
    "StoreLoadError",
]
