# services/assessment/store.py
"""Persistence for imported question sets, per-category settings and attempts."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from bank import Category, Level, Question, QuestionBank, get_default_bank, parse_level
from models import AssessmentSetting, Attempt, CustomQuestion
from scoring import Proficiency, ScoreReport

logger = logging.getLogger(__name__)


def get_use_custom(db: Session, category: Category) -> bool:
    row = db.get(AssessmentSetting, category.value)
    return bool(row and row.use_custom_questions)


def set_use_custom(db: Session, category: Category, enabled: bool) -> None:
    row = db.get(AssessmentSetting, category.value)
    if row is None:
        row = AssessmentSetting(category=category.value)
        db.add(row)
    row.use_custom_questions = enabled
    db.commit()


def _to_question(row: CustomQuestion) -> Question:
    return Question(
        id=f"custom_{row.id}",
        question=row.question,
        options=tuple(row.options),
        correct_answer=row.correct_answer,
        explanation=row.explanation or "",
        level=parse_level(row.difficulty, Level.INTERMEDIATE),
    )


def get_custom_questions(db: Session, category: Category) -> List[Question]:
    rows = db.scalars(
        select(CustomQuestion)
        .where(CustomQuestion.category == category.value, CustomQuestion.is_active.is_(True))
        .order_by(CustomQuestion.created_at, CustomQuestion.id)
    ).all()
    return [_to_question(r) for r in rows]


def save_questions(
    db: Session,
    category: Category,
    questions: Sequence[Question],
    replace_existing: bool = True,
) -> int:
    """Store `questions` as the category's active set and switch the category to it."""
    logger.info("saving %d %s questions (replace=%s)", len(questions), category.value, replace_existing)

    if replace_existing:
        db.execute(
            update(CustomQuestion)
            .where(CustomQuestion.category == category.value, CustomQuestion.is_active.is_(True))
            .values(is_active=False)
        )

    rows = [
        CustomQuestion(
            category=category.value,
            question=q.question,
            options=list(q.options),
            correct_answer=q.correct_answer,
            explanation=q.explanation or "",
            difficulty=q.level.value,
            is_active=True,
        )
        for q in questions
    ]
    db.add_all(rows)
    db.flush()

    set_use_custom(db, category, True)  # commits
    return len(rows)


def resolve_bank(db: Session, category: Category) -> Tuple[QuestionBank, bool]:
    """The bank a quiz should draw from: the custom set when enabled and non-empty."""
    if get_use_custom(db, category):
        custom = get_custom_questions(db, category)
        if custom:
            return QuestionBank(questions=tuple(custom)), True
    return get_default_bank(category), False


def record_attempt(
    db: Session,
    *,
    username: str,
    category: Category,
    report: ScoreReport,
    proficiency: Proficiency,
    duration_ms: Optional[int] = None,
) -> int:
    items: List[Dict[str, Any]] = [
        {"id": inc.question.id, "user_answer": inc.user_answer, "correct_answer": inc.question.correct_answer}
        for inc in report.incorrect
    ]
    attempt = Attempt(
        username=username,
        category=category.value,
        total=report.total,
        question_count=report.question_count,
        level_scores={level.value: n for level, n in report.level_scores.items()},
        label=proficiency.label,
        items=items,
        duration_ms=duration_ms,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)
    return attempt.id
