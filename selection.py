# services/assessment/selection.py
"""
Deterministic per-user question selection.

The generator is a port of a small browser-side PRNG: a Java-style 32-bit
string hash fed through ``sin(x) * 10000``. It is not random in any strong
sense. It is reproducible for a given platform: the same name always gets
the same quiz from this service.

The ``* 10000`` step amplifies last-ulp differences between ``sin``
implementations, so selections are NOT guaranteed to match a browser (V8's
``Math.sin``) or a different libm. The hash and the name normalisation do
match JS exactly; only the draws can drift.
"""

from __future__ import annotations

import math
from typing import Callable, List, Sequence, TypeVar

from bank import LEVEL_ORDER, Level, Question, QuestionBank

T = TypeVar("T")

QUESTIONS_PER_LEVEL = 10

_MASK32 = 0xFFFFFFFF
_SIGN32 = 0x80000000

# What String.prototype.trim() removes: WhiteSpace and LineTerminator.
# str.strip() differs (it takes U+001C-U+001F and U+0085, and keeps U+FEFF).
_JS_WHITESPACE = (
    "\t\n\v\f\r \xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def normalize_username(username: str) -> str:
    return username.lower().strip(_JS_WHITESPACE)


def seed_hash(seed: str) -> int:
    """
    hash = hash * 31 + code_unit, wrapped as a signed 32-bit int.
    Iterates UTF-16 code units so astral characters hash like they do in JS;
    lone surrogates pass through as their own code unit.
    """
    h = 0
    data = seed.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & _MASK32
    if h & _SIGN32:
        h -= 1 << 32
    return h


def seeded_random(seed: str) -> Callable[[], float]:
    """Return a stateful generator of floats in [0, 1) derived from `seed`."""
    state: float = seed_hash(seed)

    def _next() -> float:
        nonlocal state
        state = math.sin(state) * 10000
        return state - math.floor(state)

    return _next


def shuffle(items: Sequence[T], random: Callable[[], float]) -> List[T]:
    # Backward Fisher-Yates; exactly len(items) - 1 draws.
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = math.floor(random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select_questions(
    username: str, bank: QuestionBank, per_level: int = QUESTIONS_PER_LEVEL
) -> List[Question]:
    """
    Pick `per_level` questions per level for `username`, grouped in LEVEL_ORDER.

    One generator is shared across all levels, so a level's order depends on
    the pool sizes of the levels before it. A level with a short pool simply
    contributes fewer questions.
    """
    random = seeded_random(normalize_username(username))
    selected: List[Question] = []
    for level in LEVEL_ORDER:
        pool = bank.for_level(level)
        selected.extend(shuffle(pool, random)[:per_level])
    return selected


def filter_by_level(questions: Sequence[Question], level: Level) -> List[Question]:
    return [q for q in questions if q.level == level]
