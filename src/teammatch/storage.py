"""Storage collaborator contract and an in-memory implementation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Protocol, TypeVar, runtime_checkable

import structlog
from pydantic import BaseModel, ValidationError

from .errors import StoreLoadError
from .schemas import CandidateFilter, CandidateProfile, ProjectRecord, UserRecord

RecordT = TypeVar("RecordT", bound=BaseModel)

MAX_PREFILTER_CANDIDATES = 200


@runtime_checkable
class UserStore(Protocol):
    """Read-only view of users and projects consumed by the tools."""

    def find_candidates(self, candidate_filter: CandidateFilter) -> list[CandidateProfile]:
        """Return users whose skills overlap the filter's skills (any, case-insensitive)."""

    def find_user(self, user_id: str) -> UserRecord | None:
        """Return the user with ``user_id`` or None."""

    def find_project(self, project_id: str) -> ProjectRecord | None:
        """Return the project with ``project_id`` or None."""


class InMemoryUserStore:
    """List-backed store preserving insertion order."""

    def __init__(
        self,
        users: Iterable[UserRecord] = (),
        projects: Iterable[ProjectRecord] = (),
    ) -> None:
        self._users: dict[str, UserRecord] = {user.user_id: user for user in users}
        self._projects: dict[str, ProjectRecord] = {
            project.project_id: project for project in projects
        }

    def add_user(self, user: UserRecord) -> None:
        self._users[user.user_id] = user

    def add_project(self, project: ProjectRecord) -> None:
        self._projects[project.project_id] = project

    def users(self) -> list[UserRecord]:
        return list(self._users.values())

    def find_candidates(self, candidate_filter: CandidateFilter) -> list[CandidateProfile]:
        needles = [skill.lower() for skill in candidate_filter.skills if skill.strip()]
        if not needles:
            return []

        limit = min(candidate_filter.limit, MAX_PREFILTER_CANDIDATES)
        found: list[CandidateProfile] = []
        for user in self._users.values():
            if user.user_id == candidate_filter.exclude_user_id:
                continue
            if candidate_filter.availability and user.availability != candidate_filter.availability:
                continue
            if not _overlaps(needles, user.skills):
                continue
            found.append(user.to_candidate())
            if len(found) >= limit:
                break
        return found

    def find_user(self, user_id: str) -> UserRecord | None:
        return self._users.get(user_id)

    def find_project(self, project_id: str) -> ProjectRecord | None:
        return self._projects.get(project_id)


def _overlaps(needles: list[str], skills: Iterable[str]) -> bool:
    haystack = [skill.lower() for skill in skills]
    return any(needle in skill for needle in needles for skill in haystack)


class UserStoreLoader:
    """Load users and projects from JSON Lines files."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def load(self, users_path: Path, projects_path: Path | None = None) -> InMemoryUserStore:
        errors: list[str] = []
        users = self._load_records(users_path, UserRecord, errors)
        projects = self._load_records(projects_path, ProjectRecord, errors) if projects_path else []
        store = InMemoryUserStore(users=users, projects=projects)
        if errors:
            raise StoreLoadError(errors, store)
        self._logger.info("store.loaded", users=len(users), projects=len(projects))
        return store

    def load_lenient(self, users_path: Path, projects_path: Path | None = None) -> InMemoryUserStore:
        """Like :meth:`load` but keeps valid records and logs the rest."""
        try:
            return self.load(users_path, projects_path)
        except StoreLoadError as exc:
            self._logger.warning("store.partial_load", errors=exc.errors)
            return exc.partial

    @staticmethod
    def _load_records(
        path: Path,
        model: type[RecordT],
        errors: list[str],
    ) -> list[RecordT]:
        records: list[RecordT] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    payload = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"{path.name} line {idx}: invalid JSON ({exc})")
                    continue
                try:
                    records.append(model.model_validate(payload))
                except ValidationError as exc:
                    errors.append(f"{path.name} line {idx}: {exc.error_count()} validation error(s)")
        return records


__all__ = [
    "InMemoryUserStore",
    "MAX_PREFILTER_CANDIDATES",
    "UserStore",
    "UserStoreLoader",
]
