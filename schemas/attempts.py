from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: datetime | None
    username: str
    category: str
    total: int
    question_count: int
    level_scores: dict[str, int]
    label: str
    duration_ms: int | None = None
    # keep items optional; usually excluded in list views
    items: list[Any] | None = None
