"""Teacher aggregate: owner of groups, students and assistants."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from tutorgroups.models.common import Aggregate, Roster, utcnow
from tutorgroups.models.score import ScoreSettings


class Teacher(Aggregate):
    name: str
    phone: str = ""
    subject: Optional[str] = None

    # Denormalized rosters, kept in lockstep with Group and Enrollment records
    students: Roster = Field(default_factory=Roster)
    assistants: Roster = Field(default_factory=Roster)
    groups: Roster = Field(default_factory=Roster)

    score_settings: ScoreSettings = Field(default_factory=ScoreSettings)

    created_at: datetime = Field(default_factory=utcnow)
