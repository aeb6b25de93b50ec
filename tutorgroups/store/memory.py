"""Process-local AggregateStore used by tests and ``STORE_BACKEND=memory``."""
from __future__ import annotations

import logging
from typing import Sequence, TypeVar

from tutorgroups.errors import ConcurrentModificationError, NotFound
from tutorgroups.models import Aggregate, Assistant, Enrollment, Group, Teacher

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Aggregate)

_KINDS = (Teacher, Assistant, Group, Enrollment)


class InMemoryStore:
    """Keeps private copies of every aggregate.

    Callers always get a copy, so nothing they mutate is visible until it is
    committed. A commit validates every version before writing anything.
    """

    def __init__(self):
        self._records: dict[type, dict[str, Aggregate]] = {kind: {} for kind in _KINDS}

    def add(self, *aggregates: Aggregate) -> None:
        """Seed records as-is, bypassing version checks."""
        for aggregate in aggregates:
            self._records[type(aggregate)][aggregate.id] = aggregate.model_copy(deep=True)

    def _get(self, kind: type[A], aggregate_id: str) -> A:
        record = self._records[kind].get(aggregate_id)
        if record is None:
            raise NotFound(f"{kind.__name__} {aggregate_id} not found")
        return record.model_copy(deep=True)

    async def load_teacher(self, teacher_id: str) -> Teacher:
        return self._get(Teacher, teacher_id)

    async def load_assistant(self, assistant_id: str) -> Assistant:
        return self._get(Assistant, assistant_id)

    async def load_group(self, group_id: str) -> Group:
        return self._get(Group, group_id)

    async def load_enrollment(self, enrollment_id: str) -> Enrollment:
        return self._get(Enrollment, enrollment_id)

    async def find_enrollments_by_group(self, group_id: str) -> list[Enrollment]:
        return [
            e.model_copy(deep=True)
            for e in self._records[Enrollment].values()
            if e.group_id == group_id
        ]

    async def find_groups_by_teacher(self, teacher_id: str) -> list[Group]:
        return [
            g.model_copy(deep=True)
            for g in self._records[Group].values()
            if g.teacher_id == teacher_id
        ]

    def _check_version(self, aggregate: Aggregate) -> None:
        current = self._records[type(aggregate)].get(aggregate.id)
        expected = current.version if current is not None else 0
        if aggregate.version != expected:
            raise ConcurrentModificationError(
                f"{type(aggregate).__name__} {aggregate.id} changed since it was loaded",
                expected=expected,
                found=aggregate.version,
            )

    async def commit(
        self,
        save: Sequence[Aggregate] = (),
        delete: Sequence[Aggregate] = (),
    ) -> None:
        for aggregate in [*save, *delete]:
            self._check_version(aggregate)
        for aggregate in save:
            aggregate.version += 1
            self._records[type(aggregate)][aggregate.id] = aggregate.model_copy(deep=True)
        for aggregate in delete:
            self._records[type(aggregate)].pop(aggregate.id, None)
        logger.debug("Committed %d saves, %d deletes", len(save), len(delete))

    async def save(self, aggregate: Aggregate) -> None:
        await self.commit(save=[aggregate])
