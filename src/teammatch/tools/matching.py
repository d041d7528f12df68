"""``match_users_by_skills``: coarse store retrieval followed by cosine ranking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import structlog
from pydantic import ValidationError

from ..core import EmbeddingRanker, SkillRanker
from ..errors import InputError
from ..schemas import CandidateFilter, MatchRequest, MatchResult
from ..storage import MAX_PREFILTER_CANDIDATES, UserStore


@dataclass
class MatchingConfig:
    """Stage 1 pre-filter sizing. Thresholds come from the rankers."""

    prefilter_multiplier: int = 5
    prefilter_cap: int = MAX_PREFILTER_CANDIDATES


class MatchingTool:
    """Two-stage candidate matching.

    Stage 1 asks the store for at most ``min(limit * 5, 200)`` users with any
    skill overlap, which bounds the O(users x vocabulary) cosine work of
    stage 2 regardless of how many users exist.
    """

    name = "match_users_by_skills"

    def __init__(
        self,
        store: UserStore,
        ranker: SkillRanker | None = None,
        *,
        embedding_ranker: EmbeddingRanker | None = None,
        config: MatchingConfig | None = None,
    ) -> None:
        self._store = store
        self._ranker = ranker or SkillRanker()
        self._embedding_ranker = embedding_ranker
        self._config = config or MatchingConfig()
        self._logger = structlog.get_logger(__name__)

    @property
    def embeddings_enabled(self) -> bool:
        return self._embedding_ranker is not None

    def run(self, request: MatchRequest | Mapping[str, Any]) -> MatchResult:
        match_request = self.parse_request(request)

        prefilter_limit = min(
            match_request.limit * self._config.prefilter_multiplier,
            self._config.prefilter_cap,
        )
        candidates = self._store.find_candidates(
            CandidateFilter(
                skills=match_request.skills,
                limit=prefilter_limit,
                exclude_user_id=match_request.exclude_user_id,
                availability=match_request.availability_filter,
            )
        )
        self._logger.info(
            "matching.stage1",
            skills=match_request.skills,
            prefilter_limit=prefilter_limit,
            candidates=len(candidates),
        )

        if not candidates:
            return MatchResult(
                matches=[],
                searched_skills=match_request.skills,
                total_found=0,
                algorithm="cosine-binary",
            )

        if match_request.use_embeddings and self._embedding_ranker is not None:
            matches = self._embedding_ranker.rank(
                match_request.skills,
                candidates,
                top_n=match_request.limit,
            )
            algorithm = self._embedding_ranker.algorithm
        else:
            matches = self._ranker.rank(
                match_request.skills,
                candidates,
                top_n=match_request.limit,
            )
            algorithm = self._ranker.algorithm

        self._logger.info(
            "matching.stage2",
            algorithm=algorithm,
            returned=len(matches),
            top_user_id=matches[0].user_id if matches else None,
        )
        return MatchResult(
            matches=matches,
            searched_skills=match_request.skills,
            total_found=len(matches),
            algorithm=algorithm,
        )

    @staticmethod
    def parse_request(request: MatchRequest | Mapping[str, Any]) -> MatchRequest:
        if isinstance(request, MatchRequest):
            return request
        skills = request.get("skills")
        if not skills:
            raise InputError("match_users_by_skills requires at least one skill")
        try:
            return MatchRequest.model_validate(dict(request))
        except ValidationError as exc:
            raise InputError(
                f"match_users_by_skills: invalid input ({exc.error_count()} error(s))",
                details={"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc
