"""User, candidate, and project records exchanged with the store."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Availability = Literal["available", "busy", "part-time"]

AVAILABILITY_VALUES: tuple[str, ...] = ("available", "busy", "part-time")


class CandidateProfile(BaseModel):
    """Candidate user as retrieved by the pre-filter stage."""

    user_id: str
    name: str
    email: str = ""
    bio: str = ""
    skills: list[str] = Field(default_factory=list)
    availability: Availability = "available"

    model_config = ConfigDict(extra="ignore", frozen=True)


class UserRecord(BaseModel):
    """Stored user document."""

    user_id: str
    name: str
    email: str = ""
    bio: str = ""
    skills: list[str] = Field(default_factory=list)
    availability: Availability = "available"

    model_config = ConfigDict(extra="ignore")

    def to_candidate(self) -> CandidateProfile:
        return CandidateProfile(
            user_id=self.user_id,
            name=self.name,
            email=self.email,
            bio=self.bio,
            skills=list(self.skills),
            availability=self.availability,
        )


class ProjectRecord(BaseModel):
    """Stored project document."""

    project_id: str
    title: str
    description: str = ""

    model_config = ConfigDict(extra="ignore")


class CandidateFilter(BaseModel):
    """Coarse retrieval predicate handed to the store."""

    skills: list[str]
    limit: int = Field(default=25, ge=1)
    exclude_user_id: str | None = None
    availability: Availability | None = None

    model_config = ConfigDict(extra="forbid")
