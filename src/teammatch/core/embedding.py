"""Embedding-based cosine ranking with a bounded, thread-safe vector cache."""

from __future__ import annotations

import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Literal, Protocol, Sequence, runtime_checkable

import structlog

from ..errors import UpstreamError
from ..schemas import CandidateProfile, ScoredMatch
from .similarity import cosine, select_top
from .vectorizer import normalized_set

EvictionPolicy = Literal["fifo", "lru"]

EmbeddingVector = list[float]


@runtime_checkable
class EmbeddingProvider(Protocol):
    """External text embedding service."""

    def embed(self, text: str) -> Sequence[float]:
        """Return a dense embedding for ``text``."""


def cache_key(skills: Sequence[str]) -> str:
    """Order- and case-insensitive key for a skill list."""
    return "|".join(sorted(skill.lower().strip() for skill in skills))


class EmbeddingCache:
    """Bounded map from skill-list key to embedding.

    ``fifo`` evicts the oldest insertion; ``lru`` additionally refreshes an
    entry on every hit. All access is serialized by one lock so the cache can
    be shared by concurrent requests. Vectors are copied on the way in and
    out, so callers never hold a reference to a cached entry.
    """

    def __init__(self, max_size: int = 5000, eviction: EvictionPolicy = "fifo") -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if eviction not in ("fifo", "lru"):
            raise ValueError(f"Unsupported eviction policy: {eviction!r}")
        self._max_size = max_size
        self._eviction = eviction
        self._entries: OrderedDict[str, EmbeddingVector] = OrderedDict()
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries.keys())

    def get(self, key: str) -> EmbeddingVector | None:
        with self._lock:
            vector = self._entries.get(key)
            if vector is None:
                return None
            if self._eviction == "lru":
                self._entries.move_to_end(key)
            return list(vector)

    def put(self, key: str, vector: Sequence[float]) -> None:
        with self._lock:
            if key in self._entries:
                self._entries[key] = list(vector)
                if self._eviction == "lru":
                    self._entries.move_to_end(key)
                return
            while len(self._entries) >= self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._logger.debug("embedding.cache_evicted", key=evicted)
            self._entries[key] = list(vector)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


@dataclass
class EmbeddingRankerConfig:
    """Defaults for embedding-based ranking."""

    top_n: int = 3
    min_score: float = 0.3
    dimensions: int = 1536
    concurrency: int = 5


class EmbeddingRanker:
    """Rank candidates by cosine similarity of provider embeddings.

    Provider failures propagate as :class:`UpstreamError`; they are never
    treated as zero similarity.
    """

    algorithm = "cosine-embedding"

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        cache: EmbeddingCache | None = None,
        config: EmbeddingRankerConfig | None = None,
    ) -> None:
        self._provider = provider
        self._cache = cache if cache is not None else EmbeddingCache()
        self._config = config or EmbeddingRankerConfig()
        self._logger = structlog.get_logger(__name__)

    @property
    def cache(self) -> EmbeddingCache:
        return self._cache

    @property
    def default_min_score(self) -> float:
        return self._config.min_score

    def embed_skills(self, skills: Sequence[str]) -> EmbeddingVector:
        if not skills:
            return [0.0] * self._config.dimensions

        key = cache_key(skills)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        text = ", ".join(skills)
        try:
            raw = self._provider.embed(text)
        except UpstreamError:
            raise
        except Exception as exc:
            self._logger.warning("embedding.provider_failed", text=text, error=str(exc))
            raise UpstreamError(f"Embedding provider failed for {text!r}", cause=exc) from exc

        vector = [float(value) for value in raw]
        if len(vector) != self._config.dimensions:
            raise UpstreamError(
                f"Embedding provider returned {len(vector)} dimensions, "
                f"expected {self._config.dimensions}"
            )
        self._cache.put(key, vector)
        return vector

    def embed_batch(self, skill_sets: Sequence[Sequence[str]]) -> list[EmbeddingVector]:
        """Embed skill lists with bounded concurrency, preserving input order."""
        if not skill_sets:
            return []
        workers = max(1, min(self._config.concurrency, len(skill_sets)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.embed_skills, skill_sets))

    def rank(
        self,
        query_skills: Sequence[str],
        candidates: Sequence[CandidateProfile],
        top_n: int | None = None,
        min_score: float | None = None,
    ) -> list[ScoredMatch]:
        if not query_skills or not candidates:
            return []

        top_n = self._config.top_n if top_n is None else top_n
        min_score = self._config.min_score if min_score is None else min_score

        query_vector, *candidate_vectors = self.embed_batch(
            [list(query_skills), *(candidate.skills for candidate in candidates)]
        )
        scored = [
            (candidate, max(cosine(query_vector, vector), 0.0))
            for candidate, vector in zip(candidates, candidate_vectors)
        ]

        matches = select_top(scored, normalized_set(query_skills), top_n=top_n, min_score=min_score)
        self._logger.debug(
            "ranking.embedding",
            candidates=len(candidates),
            returned=len(matches),
            cache_size=len(self._cache),
        )
        return matches


__all__ = [
    "EmbeddingCache",
    "EmbeddingProvider",
    "EmbeddingRanker",
    "EmbeddingRankerConfig",
    "EvictionPolicy",
    "cache_key",
]
