from __future__ import annotations

from typing import Protocol, Sequence

from tutorgroups.models import Aggregate, Assistant, Enrollment, Group, Teacher


class AggregateStore(Protocol):
    """Load/save access to the aggregates by identity.

    Loads raise ``NotFound`` for a missing record. ``commit`` writes every
    given aggregate or none of them and raises ``PersistenceError`` on backend
    failure (``ConcurrentModificationError`` when a record changed since it
    was loaded). A successful commit bumps ``version`` on each saved aggregate.
    """

    async def load_teacher(self, teacher_id: str) -> Teacher:
        raise NotImplementedError

    async def load_assistant(self, assistant_id: str) -> Assistant:
        raise NotImplementedError

    async def load_group(self, group_id: str) -> Group:
        raise NotImplementedError

    async def load_enrollment(self, enrollment_id: str) -> Enrollment:
        raise NotImplementedError

    async def find_enrollments_by_group(self, group_id: str) -> list[Enrollment]:
        raise NotImplementedError

    async def find_groups_by_teacher(self, teacher_id: str) -> list[Group]:
        raise NotImplementedError

    async def commit(
        self,
        save: Sequence[Aggregate] = (),
        delete: Sequence[Aggregate] = (),
    ) -> None:
        raise NotImplementedError

    async def save(self, aggregate: Aggregate) -> None:
        raise NotImplementedError
