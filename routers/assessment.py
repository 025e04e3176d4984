from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bank import Category, Level
from db import get_db
from schemas.assessment import ScoreRequest, ScoreResponse, SelectionResponse
from schemas.questions import QuestionOut
from scoring import Proficiency, classify, score
from selection import filter_by_level, normalize_username, select_questions
from store import record_attempt, resolve_bank

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assessment"])


def _display_name(username: str) -> str:
    # Lone surrogates select fine but cannot be stored or sent back as UTF-8.
    return username.encode("utf-8", "replace").decode("utf-8")


@router.get("/assessment/{category}/questions", response_model=SelectionResponse)
def get_selection(
    category: Category,
    username: str = Query(min_length=1, max_length=128),
    level: Optional[Level] = None,
    db: Session = Depends(get_db),
):
    if not normalize_username(username):
        raise HTTPException(status_code=422, detail="username required")

    bank, using_custom = resolve_bank(db, category)
    selected = select_questions(username, bank)
    if level is not None:
        selected = filter_by_level(selected, level)

    return {
        "username": _display_name(username),
        "using_custom": using_custom,
        "total": len(selected),
        "questions": [QuestionOut.model_validate(q.model_dump()) for q in selected],
    }


@router.post("/assessment/{category}/score", response_model=ScoreResponse)
def score_assessment(category: Category, req: ScoreRequest, db: Session = Depends(get_db)):
    # The selection is never stored; rebuild it from the name and active bank.
    bank, _ = resolve_bank(db, category)
    selected = select_questions(req.username, bank)
    report = score(selected, req.answers)
    proficiency = classify(report.total)

    count = len(selected)
    # rounds half up, like the results page does
    percentage = (report.total * 200 + count) // (2 * count) if count else 0

    attempt_id: Optional[int] = None
    try:
        attempt_id = record_attempt(
            db,
            username=_display_name(req.username).strip(),
            category=category,
            report=report,
            proficiency=proficiency,
            duration_ms=req.duration_ms,
        )
    except Exception:
        logger.exception("failed to record attempt for %s", _display_name(req.username))
        db.rollback()

    return {
        "ok": True,
        "username": _display_name(req.username),
        "total": report.total,
        "question_count": count,
        "percentage": percentage,
        "level_scores": report.level_scores,
        "proficiency": proficiency,
        "incorrect": report.incorrect,
        "attempt_id": attempt_id,
    }


@router.get("/proficiency", response_model=Proficiency)
def get_proficiency(score: int = Query(ge=0, le=40)):
    return classify(score)
