"""Group aggregate: student roster, fee prices and the attendance-round log."""
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field

from tutorgroups.models.common import Aggregate, Roster, utcnow

Weekday = Literal["sat", "sun", "mon", "tue", "wed", "thu", "fri"]


class FeeKind(str, Enum):
    ATTENDANCE = "attendance"
    BOOKS = "books"

    @property
    def field_name(self) -> str:
        return f"{self.value}_fee"


class RoundRecord(BaseModel):
    round_id: str
    teacher_id: str
    opened_at: datetime


class RoundLog(BaseModel):
    """Attendance rounds opened for a group, most recent first."""

    details: list[RoundRecord] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.details)

    @property
    def latest(self) -> Optional[RoundRecord]:
        return self.details[0] if self.details else None

    def push(self, record: RoundRecord) -> None:
        self.details.insert(0, record)


class Group(Aggregate):
    name: str
    teacher_id: str
    day: Optional[Weekday] = None

    # Prices only; what each student actually paid lives on the enrollment
    attendance_fee: float = Field(default=0.0, ge=0)
    books_fee: float = Field(default=0.0, ge=0)

    students: Roster = Field(default_factory=Roster)
    attendance_rounds: RoundLog = Field(default_factory=RoundLog)

    created_at: datetime = Field(default_factory=utcnow)

    def fee(self, kind: FeeKind) -> float:
        return getattr(self, kind.field_name)

    def set_fee(self, kind: FeeKind, amount: float) -> None:
        setattr(self, kind.field_name, amount)
