from __future__ import annotations

import logging
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from bank import Category, reload_banks
from db import get_db
from deps.auth import require_admin
from extraction import ExtractionError, QuestionExtractor
from schemas.questions import (
    ExtractRequest,
    ExtractResponse,
    SaveQuestionsRequest,
    SaveQuestionsResponse,
    SettingsUpdate,
)
from store import get_use_custom, save_questions, set_use_custom

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def get_extractor() -> Iterator[QuestionExtractor]:
    with QuestionExtractor() as extractor:
        yield extractor


@router.post("/extract", response_model=ExtractResponse)
def extract_questions(req: ExtractRequest, extractor: QuestionExtractor = Depends(get_extractor)):
    url = (req.url or "").strip() or None
    text = (req.text_content or "").strip() or None
    try:
        questions = extractor.extract(url=url, text_content=text)
    except ExtractionError as e:
        return JSONResponse(status_code=e.status_code, content={"success": False, "error": e.message})

    return {"success": True, "questions": questions, "total_extracted": len(questions)}


@router.post("/questions/{category}", response_model=SaveQuestionsResponse)
def save_question_set(category: Category, req: SaveQuestionsRequest, db: Session = Depends(get_db)):
    if not req.questions:
        raise HTTPException(status_code=400, detail="No questions provided")

    questions = [q.to_question(i) for i, q in enumerate(req.questions)]
    n = save_questions(db, category, questions, replace_existing=req.replace_existing)
    return {
        "success": True,
        "saved_count": n,
        "message": f"{n} questions saved as default for all users",
    }


@router.put("/settings/{category}")
def update_settings(category: Category, req: SettingsUpdate, db: Session = Depends(get_db)):
    set_use_custom(db, category, req.use_custom_questions)
    return {"ok": True, "category": category.value, "use_custom_questions": get_use_custom(db, category)}


@router.post("/reload")
def reload_questions():
    counts = reload_banks()
    logger.info("reloaded default banks: %s", counts)
    return {"ok": True, "counts": counts}
