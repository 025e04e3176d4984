# services/assessment/schemas/assessment.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from bank import Level
from schemas.questions import QuestionOut
from selection import normalize_username
from scoring import IncorrectAnswer, Proficiency

# ---------- Selection ----------


class SelectionResponse(BaseModel):
    username: str
    using_custom: bool
    total: int
    questions: List[QuestionOut]


# ---------- Score ----------


class ScoreRequest(BaseModel):
    username: str = Field(max_length=128)
    # question id -> chosen option index
    answers: Dict[str, int] = {}
    # Client-measured time on the quiz, stored with the attempt.
    duration_ms: Optional[int] = Field(default=None, ge=0)

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, v: str) -> str:
        if not normalize_username(v):
            raise ValueError("username required")
        return v


class ScoreResponse(BaseModel):
    ok: bool
    username: str
    total: int
    question_count: int
    percentage: int
    level_scores: Dict[Level, int]
    proficiency: Proficiency
    incorrect: List[IncorrectAnswer]
    attempt_id: Optional[int] = None
