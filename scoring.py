# services/assessment/scoring.py

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from bank import LEVEL_ORDER, Level, Question

# (threshold, label, description, category), highest first
PROFICIENCY_TIERS = (
    (35, "Proficient", "Exceptional command of English grammar", "proficient"),
    (28, "Advanced", "Strong grasp of complex grammatical structures", "advanced"),
    (20, "Intermediate", "Good understanding of essential grammar rules", "intermediate"),
    (0, "Basic", "Foundation level with room for growth", "basic"),
)


class IncorrectAnswer(BaseModel):
    question: Question
    user_answer: Optional[int] = None


class ScoreReport(BaseModel):
    total: int
    level_scores: Dict[Level, int]
    incorrect: List[IncorrectAnswer]

    @property
    def question_count(self) -> int:
        return self.total + len(self.incorrect)


class Proficiency(BaseModel):
    label: str
    description: str
    category: str


def score(questions: Sequence[Question], answers: Mapping[str, int]) -> ScoreReport:
    """
    Grade `answers` (question id -> option index) against `questions`.
    Missing ids are scored as wrong and reported with user_answer=None.
    """
    level_scores: Dict[Level, int] = {level: 0 for level in LEVEL_ORDER}
    incorrect: List[IncorrectAnswer] = []

    for q in questions:
        user_answer = answers.get(q.id)
        if user_answer == q.correct_answer:
            level_scores[q.level] += 1
        else:
            incorrect.append(IncorrectAnswer(question=q, user_answer=user_answer))

    return ScoreReport(
        total=sum(level_scores.values()),
        level_scores=level_scores,
        incorrect=incorrect,
    )


def classify(total: int) -> Proficiency:
    for threshold, label, description, category in PROFICIENCY_TIERS:
        if total >= threshold:
            break
    # Negative totals can't happen from score(); they still land on the last tier.
    return Proficiency(label=label, description=description, category=category)
