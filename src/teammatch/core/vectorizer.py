"""Skill normalization and binary bag-of-skills encoding."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

Vocabulary = dict[str, int]
SkillVector = list[float]


def normalize_skill(skill: str) -> str:
    """Canonical form of a skill: ``"React.js "`` and ``"reactjs"`` collide."""
    lowered = skill.lower()
    stripped = _NON_ALNUM.sub("", lowered)
    return _WHITESPACE.sub(" ", stripped).strip()


def build_vocabulary(skill_sets: Iterable[Sequence[str]]) -> Vocabulary:
    """Assign dense indices to normalized skills in first-seen order."""
    vocabulary: Vocabulary = {}
    for skills in skill_sets:
        for skill in skills:
            token = normalize_skill(skill)
            if token and token not in vocabulary:
                vocabulary[token] = len(vocabulary)
    return vocabulary


def encode(skills: Iterable[str], vocabulary: Vocabulary) -> SkillVector:
    """Binary presence vector of ``skills`` over ``vocabulary``.

    Skills missing from the vocabulary contribute nothing.
    """
    vector = [0.0] * len(vocabulary)
    for skill in skills:
        index = vocabulary.get(normalize_skill(skill))
        if index is not None:
            vector[index] = 1.0
    return vector


def normalized_set(skills: Iterable[str]) -> set[str]:
    return {token for token in (normalize_skill(skill) for skill in skills) if token}


__all__ = [
    "SkillVector",
    "Vocabulary",
    "build_vocabulary",
    "encode",
    "normalize_skill",
    "normalized_set",
]
