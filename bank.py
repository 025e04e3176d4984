# services/assessment/bank.py

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

_BASE = Path(__file__).resolve().parent
_DATA_DIR = _BASE / "data" / "questions"


class Level(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    UPPER_ADVANCED = "upper-advanced"


# Iteration order for selection and reporting; never rely on dict/enum order.
LEVEL_ORDER: Tuple[Level, ...] = (
    Level.BASIC,
    Level.INTERMEDIATE,
    Level.ADVANCED,
    Level.UPPER_ADVANCED,
)


class Category(str, Enum):
    ENGLISH = "english"
    INTERVIEW = "interview"


def parse_level(value: Any, default: Level = Level.INTERMEDIATE) -> Level:
    """Map an untrusted level tag onto Level, falling back to `default`."""
    try:
        return Level(value)
    except ValueError:
        return default


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    question: str
    options: Tuple[str, str, str]
    correct_answer: int = Field(alias="correctAnswer", ge=0, le=2)
    explanation: str = ""
    level: Level

    @field_validator("id", "question")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class QuestionBank(BaseModel):
    """Immutable, ordered collection of questions handed to the selector."""

    model_config = ConfigDict(frozen=True)

    questions: Tuple[Question, ...] = ()

    def __len__(self) -> int:
        return len(self.questions)

    def for_level(self, level: Level) -> List[Question]:
        return [q for q in self.questions if q.level == level]

    def get(self, qid: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == qid), None)

    def level_counts(self) -> Dict[Level, int]:
        return {level: len(self.for_level(level)) for level in LEVEL_ORDER}


def _iter_jsonl(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        for idx, line in enumerate(f, 1):
            s = line.strip()
            if not s or s.startswith("#") or s.startswith("//"):
                continue
            try:
                yield json.loads(s)
            except json.JSONDecodeError:
                logger.warning("skipping malformed row %s:%d", p.name, idx)
                continue


def _iter_json(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError:
            # Treat a broken JSON file as empty
            data = []
    if isinstance(data, list):
        yield from data


def load_bank(path: Path) -> QuestionBank:
    """Build a bank from a .jsonl or .json file, dropping invalid records."""
    if path.suffix.lower() == ".jsonl":
        source = _iter_jsonl(path)
    else:
        source = _iter_json(path)

    questions: List[Question] = []
    seen: set[str] = set()
    for raw in source:
        try:
            q = Question.model_validate(raw)
        except ValidationError:
            qid = raw.get("id") if isinstance(raw, dict) else None
            logger.warning("skipping invalid question %r in %s", qid, path.name)
            continue
        if q.id in seen:
            logger.warning("skipping duplicate question id %s in %s", q.id, path.name)
            continue
        seen.add(q.id)
        questions.append(q)
    return QuestionBank(questions=tuple(questions))


def _bank_file(category: Category, data_dir: Path) -> Optional[Path]:
    for suffix in (".jsonl", ".json"):
        p = data_dir / f"{category.value}{suffix}"
        if p.is_file():
            return p
    return None


_default_banks: Dict[Category, QuestionBank] = {}


def get_default_bank(category: Category = Category.ENGLISH) -> QuestionBank:
    """Reference catalogue for a category; categories without a file share the english one."""
    bank = _default_banks.get(category)
    if bank is not None:
        return bank

    path = _bank_file(category, _DATA_DIR)
    if path is None and category is not Category.ENGLISH:
        bank = get_default_bank(Category.ENGLISH)
    elif path is None:
        logger.error("no question bank found in %s", _DATA_DIR)
        bank = QuestionBank()
    else:
        bank = load_bank(path)
        logger.info("loaded %d %s questions from %s", len(bank), category.value, path.name)

    _default_banks[category] = bank
    return bank


def reload_banks() -> Dict[str, int]:
    _default_banks.clear()
    return {c.value: len(get_default_bank(c)) for c in Category}
