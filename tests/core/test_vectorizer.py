from __future__ import annotations

import pytest

from teammatch.core.vectorizer import build_vocabulary, encode, normalize_skill


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("React", "react"),
        ("React.js", "reactjs"),
        ("  Node   JS ", "node js"),
        ("C++", "c"),
        ("Machine\tLearning", "machine learning"),
        ("!!!", ""),
    ],
)
def test_normalize_skill(raw: str, expected: str):
    assert normalize_skill(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["React.js", "  Node   JS ", "C#/.NET", "Data-Science", "ÜX Design", "", "  "],
)
def test_normalize_skill_is_idempotent(raw: str):
    once = normalize_skill(raw)
    assert normalize_skill(once) == once


def test_build_vocabulary_uses_first_seen_order():
    vocab = build_vocabulary([["React", "Node.js"], ["react", "TypeScript", "nodejs"]])

    assert vocab == {"react": 0, "nodejs": 1, "typescript": 2}


def test_build_vocabulary_skips_empty_tokens():
    assert build_vocabulary([["!!!", "  "], []]) == {}


def test_encode_sets_binary_presence_and_ignores_unknown_skills():
    vocab = build_vocabulary([["React", "Node.js", "TypeScript"]])

    vector = encode(["typescript", "Go", "REACT"], vocab)

    assert vector == [1.0, 0.0, 1.0]


def test_encode_duplicate_skills_stay_binary():
    vocab = build_vocabulary([["React"]])

    assert encode(["React", "react", "React.."], vocab) == [1.0]
