"""Enrollment: one student's membership with a teacher, in exactly one home group.

Holds the attendance bookkeeping and the two payment ledgers. Every ledger
is a single list, most recent first, whose ``count`` is derived from it.
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field

from tutorgroups.models.common import Aggregate, TimestampLog, utcnow
from tutorgroups.models.score import ScoreLog


class RoundState(str, Enum):
    """Where a student stands in their home group's current round."""

    UNCONFIRMED = "unconfirmed"
    PRESENT = "present"
    PRESENT_ELSEWHERE = "present_elsewhere"  # guest attendance awaiting the next home round


class AttendanceLog(TimestampLog):
    """Confirmed attendance dates plus the current round state."""

    state: RoundState = RoundState.UNCONFIRMED

    @computed_field
    @property
    def has_recorded_attendance(self) -> bool:
        return self.state != RoundState.UNCONFIRMED

    @computed_field
    @property
    def attended_from_another_group(self) -> bool:
        return self.state == RoundState.PRESENT_ELSEWHERE


class Payment(BaseModel):
    amount: float
    date: datetime


class PaymentLog(BaseModel):
    """Attendance-fee payments with a running total kept alongside the entries."""

    details: list[Payment] = Field(default_factory=list)
    total_paid: float = 0.0

    @computed_field
    @property
    def count(self) -> int:
        return len(self.details)

    def record(self, amount: float, at: datetime) -> Payment:
        payment = Payment(amount=amount, date=at)
        self.details.insert(0, payment)
        self.total_paid += amount
        return payment

    def reverse(self) -> Payment:
        payment = self.details.pop(0)
        # float residue must not leave a negative balance behind
        self.total_paid = max(0.0, self.total_paid - payment.amount) if self.details else 0.0
        return payment


class Enrollment(Aggregate):
    teacher_id: str
    group_id: str  # home group
    name: str
    phone: str = ""

    absence: TimestampLog = Field(default_factory=TimestampLog)
    attendance: AttendanceLog = Field(default_factory=AttendanceLog)
    attendance_payment: PaymentLog = Field(default_factory=PaymentLog)
    books_payment: TimestampLog = Field(default_factory=TimestampLog)
    scores: ScoreLog = Field(default_factory=ScoreLog)

    created_at: datetime = Field(default_factory=utcnow)
