"""Quiz scores: per-teacher limits and the per-student score log."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from tutorgroups.models.common import new_id


class ScoreLimit(str, Enum):
    MAX = "max"
    REDO = "redo"

    @property
    def field_name(self) -> str:
        return f"{self.value}_score"


class ScoreSettings(BaseModel):
    """Scale every new score is out of, and the mark below which a quiz is redone."""

    max_score: float = Field(default=100.0, gt=0)
    redo_score: float = Field(default=0.0, ge=0)


class Score(BaseModel):
    id: str = Field(default_factory=new_id)
    group_id: str
    score: float
    # Limits in force when the score was taken; later setting changes leave it alone
    max_score: float
    redo_score: float = 0.0
    taken_on: date
    recorded_at: datetime

    @computed_field
    @property
    def needs_redo(self) -> bool:
        return self.score < self.redo_score


class ScoreLog(BaseModel):
    """Scores, most recent first."""

    details: list[Score] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.details)

    def find(self, score_id: str) -> Optional[Score]:
        return next((s for s in self.details if s.id == score_id), None)

    def push(self, score: Score) -> None:
        self.details.insert(0, score)

    def remove(self, score_id: str) -> bool:
        kept = [s for s in self.details if s.id != score_id]
        removed = len(kept) != len(self.details)
        self.details = kept
        return removed

    def taken_on(self, day: date) -> list[Score]:
        return [s for s in self.details if s.taken_on == day]
