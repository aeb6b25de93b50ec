"""Building blocks shared by the aggregates: identities, rosters, dated logs."""
from datetime import datetime, timezone
import uuid

from pydantic import BaseModel, Field, computed_field


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Aggregate(BaseModel):
    """Root of every persisted record: opaque string identity plus a save counter."""

    id: str = Field(default_factory=new_id)
    version: int = 0


class RosterEntry(BaseModel):
    id: str
    name: str


class Roster(BaseModel):
    """Membership list in join order. ``count`` is always ``len(details)``."""

    details: list[RosterEntry] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.details)

    def __contains__(self, entry_id: object) -> bool:
        return any(entry.id == entry_id for entry in self.details)

    def ids(self) -> list[str]:
        return [entry.id for entry in self.details]

    def names(self) -> list[str]:
        return [entry.name for entry in self.details]

    def add(self, entry_id: str, name: str) -> None:
        if entry_id in self:
            raise ValueError(f"{entry_id} is already on the roster")
        self.details.append(RosterEntry(id=entry_id, name=name))

    def remove(self, entry_id: str) -> bool:
        kept = [entry for entry in self.details if entry.id != entry_id]
        removed = len(kept) != len(self.details)
        self.details = kept
        return removed


class TimestampLog(BaseModel):
    """Dates, most recent first."""

    details: list[datetime] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return len(self.details)

    @property
    def latest(self) -> datetime | None:
        return self.details[0] if self.details else None

    def push(self, at: datetime) -> None:
        self.details.insert(0, at)

    def pop(self) -> datetime:
        return self.details.pop(0)
