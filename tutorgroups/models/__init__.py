"""Aggregate models and principal types."""
from tutorgroups.models.common import Aggregate, Roster, RosterEntry, TimestampLog, new_id, utcnow
from tutorgroups.models.teacher import Teacher
from tutorgroups.models.assistant import Assistant
from tutorgroups.models.group import FeeKind, Group, RoundLog, RoundRecord, Weekday
from tutorgroups.models.score import Score, ScoreLimit, ScoreLog, ScoreSettings
from tutorgroups.models.enrollment import AttendanceLog, Enrollment, Payment, PaymentLog, RoundState
from tutorgroups.models.principal import Actor, Principal, UserRole

__all__ = [
    "Aggregate",
    "Roster",
    "RosterEntry",
    "TimestampLog",
    "new_id",
    "utcnow",
    "Teacher",
    "Assistant",
    "FeeKind",
    "Group",
    "RoundLog",
    "RoundRecord",
    "Weekday",
    "AttendanceLog",
    "Enrollment",
    "Payment",
    "PaymentLog",
    "RoundState",
    "Score",
    "ScoreLimit",
    "ScoreLog",
    "ScoreSettings",
    "Actor",
    "Principal",
    "UserRole",
]
