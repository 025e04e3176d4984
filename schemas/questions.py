# services/assessment/schemas/questions.py
from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from bank import Level, Question


class QuestionOut(BaseModel):
    """A question as shown to the quiz taker: no answer key."""

    id: str
    question: str
    options: Tuple[str, str, str]
    level: Level


class QuestionSetResponse(BaseModel):
    success: bool = True
    use_custom_questions: bool
    questions: List[Question]
    total_count: int
    message: Optional[str] = None


# ---------- Import / save ----------


class ExtractRequest(BaseModel):
    url: Optional[str] = None
    text_content: Optional[str] = Field(default=None, alias="textContent")

    model_config = {"populate_by_name": True}


class ExtractResponse(BaseModel):
    success: bool
    questions: List[Question] = []
    total_extracted: int = 0
    error: Optional[str] = None


class QuestionIn(BaseModel):
    """A question submitted for saving; ids are reassigned by the store."""

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    id: Optional[str] = None
    question: str = Field(min_length=1)
    options: Tuple[str, str, str]
    correct_answer: int = Field(alias="correctAnswer", ge=0, le=2)
    explanation: str = ""
    level: Level = Level.INTERMEDIATE

    def to_question(self, index: int) -> Question:
        return Question(
            id=self.id or f"pending_{index}",
            question=self.question,
            options=self.options,
            correct_answer=self.correct_answer,
            explanation=self.explanation,
            level=self.level,
        )


class SaveQuestionsRequest(BaseModel):
    questions: List[QuestionIn]
    replace_existing: bool = Field(default=True, alias="replaceExisting")

    model_config = {"populate_by_name": True}


class SaveQuestionsResponse(BaseModel):
    success: bool
    saved_count: int
    message: str


class SettingsUpdate(BaseModel):
    use_custom_questions: bool = Field(alias="useCustomQuestions")

    model_config = {"populate_by_name": True}
