from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from bank import Category, Question
from db import get_db
from schemas.questions import QuestionSetResponse
from store import get_custom_questions, get_use_custom, resolve_bank

router = APIRouter(tags=["questions"])


@router.get("/questions/{category}", response_model=QuestionSetResponse)
def get_question_set(category: Category, db: Session = Depends(get_db)):
    if not get_use_custom(db, category):
        return {
            "use_custom_questions": False,
            "questions": [],
            "total_count": 0,
            "message": "Using default question bank",
        }

    questions = get_custom_questions(db, category)
    if not questions:
        return {
            "use_custom_questions": False,
            "questions": [],
            "total_count": 0,
            "message": "No custom questions found, using default",
        }

    return {
        "use_custom_questions": True,
        "questions": questions,
        "total_count": len(questions),
    }


@router.get("/questions/{category}/{qid}", response_model=Question)
def get_question_detail(category: Category, qid: str, db: Session = Depends(get_db)):
    bank, _ = resolve_bank(db, category)
    q = bank.get(qid)
    if not q:
        raise HTTPException(status_code=404, detail="question not found")
    return q
