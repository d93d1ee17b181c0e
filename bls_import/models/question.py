from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Question bank and question pool models.

Question mirrors the subset of the ``questions`` table the pool feature
needs. QuestionPool is derived from the question bank (never stored), and
PoolAssignments is the explicit configuration record mapping each test type
to the pool it draws questions from.
"""

__all__ = [
    "TEST_TYPES",
    "Question",
    "QuestionPool",
    "PoolAssignments",
]

TEST_TYPES = ("pre_test", "post_test")


@dataclass(frozen=True)
class Question:
    id: str
    question_text: str
    test_type: str | None = None  # pre_test / post_test
    question_set: str | None = None  # e.g. "Set A"
    category: str | None = None
    difficulty_level: str | None = None  # easy / medium / hard
    is_active: bool = True

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Question:
        return cls(
            id=str(data["id"]),
            question_text=str(data.get("question_text") or ""),
            test_type=data.get("test_type") or None,
            question_set=data.get("question_set") or None,
            category=data.get("category") or None,
            difficulty_level=data.get("difficulty_level") or None,
            is_active=bool(data.get("is_active", True)),
        )


@dataclass(frozen=True)
class QuestionPool:
    """Named subset of the question bank assignable to a pre-test or post-test."""
    id: str
    name: str
    description: str
    test_type: str  # pre_test / post_test / both
    question_ids: list[str]
    tags: list[str] = field(default_factory=list)
    difficulty_distribution: dict[str, int] = field(default_factory=dict)
    category_distribution: dict[str, int] = field(default_factory=dict)
    is_active: bool = True

    def serves(self, test_type: str) -> bool:
        return self.test_type in (test_type, "both")


@dataclass(frozen=True)
class PoolAssignments:
    """Test type -> assigned pool id (``None`` = no pool assigned)."""
    pre_test: str | None = None
    post_test: str | None = None

    def get(self, test_type: str) -> str | None:
        if test_type not in TEST_TYPES:
            raise ValueError(f"unknown test type: {test_type}")
        return self.pre_test if test_type == "pre_test" else self.post_test

    def with_assignment(self, test_type: str, pool_id: str | None) -> PoolAssignments:
        if test_type not in TEST_TYPES:
            raise ValueError(f"unknown test type: {test_type}")
        if test_type == "pre_test":
            return PoolAssignments(pre_test=pool_id, post_test=self.post_test)
        return PoolAssignments(pre_test=self.pre_test, post_test=pool_id)

    def to_dict(self) -> dict[str, str | None]:
        # preTest/postTest keys match the assignments record of the web client
        return {"preTest": self.pre_test, "postTest": self.post_test}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PoolAssignments:
        return cls(pre_test=data.get("preTest") or None, post_test=data.get("postTest") or None)
