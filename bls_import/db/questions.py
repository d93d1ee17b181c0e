from __future__ import annotations

from typing import Any

from ..models.question import Question

__all__ = [
    "QuestionReadError",
    "QUESTION_COLUMNS",
    "fetch_questions",
]

QUESTION_COLUMNS = ("id", "question_text", "test_type", "question_set", "category", "difficulty_level", "is_active")


class QuestionReadError(Exception):
    pass


def fetch_questions(cursor: Any, active_only: bool = True) -> list[Question]:
    """Read the question bank in insertion order."""
    sql = f"SELECT {', '.join(QUESTION_COLUMNS)} FROM questions"
    if active_only:
        sql += " WHERE is_active = TRUE"
    sql += " ORDER BY created_at, id"
    try:
        cursor.execute(sql)
        rows = cursor.fetchall()
    except Exception as e:
        raise QuestionReadError(f"Failed to fetch questions: {e}") from e
    return [Question.from_mapping(dict(zip(QUESTION_COLUMNS, r, strict=False))) for r in rows]
