from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from ..models.question import TEST_TYPES, PoolAssignments, Question, QuestionPool

"""Question pools and pool assignments.

Pools are derived from the question bank: questions of each test type are
grouped by their ``question_set`` (falling back to positional sets) and
every group becomes one pool. Which pool each test draws from is an
explicit PoolAssignments record, loaded and saved through an injected
AssignmentStore.
"""

__all__ = [
    "DEFAULT_SET",
    "SPLIT_THRESHOLD",
    "AssignmentStore",
    "InMemoryAssignmentStore",
    "JsonFileAssignmentStore",
    "group_questions_by_set",
    "build_pools",
    "pools_for_test_type",
    "search_pools",
    "pool_statistics",
    "find_pool",
    "assign_pool",
    "get_assigned_pool",
]

logger = logging.getLogger(__name__)

DEFAULT_SET = "Set A"
# Unlabelled banks of this size or more are split into three positional sets
SPLIT_THRESHOLD = 90
_POSITIONAL_SETS = ("Set A", "Set B", "Set C")

_DIFFICULTY_SCORES = {"easy": 1, "medium": 2, "hard": 3}


class AssignmentStore(Protocol):
    def load(self) -> PoolAssignments: ...

    def save(self, assignments: PoolAssignments) -> None: ...


class InMemoryAssignmentStore:
    def __init__(self, assignments: PoolAssignments | None = None) -> None:
        self.assignments = assignments or PoolAssignments()

    def load(self) -> PoolAssignments:
        return self.assignments

    def save(self, assignments: PoolAssignments) -> None:
        self.assignments = assignments


class JsonFileAssignmentStore:
    """Assignments kept in a small JSON file (``{"preTest": ..., "postTest": ...}``)."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> PoolAssignments:
        if not self.path.exists():
            return PoolAssignments()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"ignoring unreadable pool assignments {self.path}: {e}")
            return PoolAssignments()
        if not isinstance(data, dict):
            logger.warning(f"ignoring malformed pool assignments {self.path}")
            return PoolAssignments()
        return PoolAssignments.from_dict(data)

    def save(self, assignments: PoolAssignments) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(assignments.to_dict(), indent=2) + "\n", encoding="utf-8")


def group_questions_by_set(questions: list[Question]) -> dict[str, list[Question]]:
    """Group questions by set name, preserving first-seen set order."""
    total = len(questions)
    per_set = math.ceil(total / 3) if total >= SPLIT_THRESHOLD else total
    sets: dict[str, list[Question]] = {}
    for position, question in enumerate(questions):
        if question.question_set and question.question_set.strip():
            name = question.question_set.strip()
        elif total >= SPLIT_THRESHOLD:
            name = _POSITIONAL_SETS[min(position // per_set, 2)]
        else:
            name = DEFAULT_SET
        sets.setdefault(name, []).append(question)
    return sets


def _category_distribution(questions: Iterable[Question]) -> dict[str, int]:
    distribution: dict[str, int] = {}
    for q in questions:
        key = q.category or "uncategorized"
        distribution[key] = distribution.get(key, 0) + 1
    return distribution


def _slug(set_name: str) -> str:
    return set_name.lower().replace(" ", "_")


def build_pools(questions: Iterable[Question]) -> list[QuestionPool]:
    """One pool per (test type, question set), pre-test pools first."""
    bank = list(questions)
    pools: list[QuestionPool] = []
    for test_type in TEST_TYPES:
        label = "Pre Test" if test_type == "pre_test" else "Post Test"
        tag = test_type.replace("_", "-")
        of_type = [q for q in bank if q.test_type == test_type]
        for set_name, members in group_questions_by_set(of_type).items():
            count = len(members)
            pools.append(
                QuestionPool(
                    id=f"pool_{test_type}_{_slug(set_name)}",
                    name=f"Basic Life Support - {label} {set_name}",
                    description=f"Questions for BLS {tag} evaluation - {set_name} ({count} questions)",
                    test_type=test_type,
                    question_ids=[q.id for q in members],
                    tags=["bls", tag, set_name.lower()],
                    difficulty_distribution={
                        "easy": math.floor(count * 0.3),
                        "medium": math.floor(count * 0.5),
                        "hard": math.floor(count * 0.2),
                    },
                    category_distribution=_category_distribution(members),
                )
            )
    return pools


def pools_for_test_type(pools: Iterable[QuestionPool], test_type: str) -> list[QuestionPool]:
    return [p for p in pools if p.serves(test_type)]


def search_pools(pools: Iterable[QuestionPool], query: str, test_type: str | None = None) -> list[QuestionPool]:
    """Case-insensitive match on name, description or tags."""
    needle = query.lower()
    found = [
        p
        for p in pools
        if needle in p.name.lower()
        or needle in p.description.lower()
        or any(needle in t.lower() for t in p.tags)
    ]
    if test_type is not None:
        found = [p for p in found if p.serves(test_type)]
    return found


def find_pool(pools: Iterable[QuestionPool], pool_id: str) -> QuestionPool | None:
    return next((p for p in pools if p.id == pool_id), None)


def pool_statistics(pool: QuestionPool, questions: Iterable[Question]) -> dict[str, object]:
    """Counts for one pool, computed over the questions it references."""
    wanted = set(pool.question_ids)
    members = [q for q in questions if q.id in wanted]
    if members:
        average = sum(_DIFFICULTY_SCORES.get(q.difficulty_level or "", 2) for q in members) / len(members)
    else:
        average = 2.0
    return {
        "total_questions": len(members),
        "difficulty_breakdown": dict(pool.difficulty_distribution),
        "category_breakdown": dict(pool.category_distribution),
        "average_difficulty": average,
    }


def assign_pool(store: AssignmentStore, test_type: str, pool_id: str | None) -> PoolAssignments:
    """Assign (or clear, with None) the pool used for ``test_type`` and persist it."""
    updated = store.load().with_assignment(test_type, pool_id)
    store.save(updated)
    logger.info(f"pool assignment: {test_type} -> {pool_id or '(none)'}")
    return updated


def get_assigned_pool(
    store: AssignmentStore, test_type: str, pools: Iterable[QuestionPool]
) -> QuestionPool | None:
    """The pool assigned to ``test_type``, or None if unassigned or no longer present."""
    pool_id = store.load().get(test_type)
    if pool_id is None:
        return None
    pool = find_pool(pools, pool_id)
    if pool is None:
        logger.warning(f"assigned {test_type} pool {pool_id} does not exist in the question bank")
    return pool
