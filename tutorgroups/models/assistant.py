"""Assistants act on their teacher's groups and students."""
from datetime import datetime

from pydantic import Field

from tutorgroups.models.common import Aggregate, utcnow


class Assistant(Aggregate):
    teacher_id: str
    name: str
    created_at: datetime = Field(default_factory=utcnow)
