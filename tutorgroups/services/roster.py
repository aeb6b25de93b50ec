"""Roster maintenance: groups, students and assistants on the teacher record.

Every membership change writes the member record and both rosters that
list it in one commit, so the teacher's and the groups' views never drift.
"""
from __future__ import annotations

import logging
from typing import Optional

from tutorgroups.errors import DuplicateGroupNameError, NotFound, ValidationError
from tutorgroups.models import Actor, Assistant, Enrollment, Group, Weekday
from tutorgroups.services.access import ensure_enrollment_access, ensure_group_access, require
from tutorgroups.services.locks import AggregateLocks, enrollment_key, group_key, teacher_key
from tutorgroups.store import AggregateStore

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name must not be empty")
    return name


class RosterCoordinator:
    def __init__(self, store: AggregateStore, locks: Optional[AggregateLocks] = None):
        self._store = store
        self._locks = locks or AggregateLocks()

    async def create_group(self, actor: Actor, name: str, day: Optional[Weekday] = None) -> Group:
        require(actor, "groups.create")
        name = _clean_name(name)

        async with self._locks.hold(teacher_key(actor.teacher_id)):
            teacher = await self._store.load_teacher(actor.teacher_id)
            if name in (n.strip() for n in teacher.groups.names()):
                raise DuplicateGroupNameError(f"Group '{name}' already exists")

            group = Group(name=name, teacher_id=teacher.id, day=day)
            teacher.groups.add(group.id, group.name)
            await self._store.commit(save=[group, teacher])

        logger.info("Teacher %s created group %s (%s)", teacher.id, group.id, group.name)
        return group

    async def add_student(self, group_id: str, actor: Actor, name: str, phone: str = "") -> Enrollment:
        require(actor, "students.add")
        name = _clean_name(name)

        async with self._locks.hold(teacher_key(actor.teacher_id), group_key(group_id)):
            group = await self._store.load_group(group_id)
            ensure_group_access(group, actor)
            teacher = await self._store.load_teacher(actor.teacher_id)

            enrollment = Enrollment(teacher_id=teacher.id, group_id=group.id, name=name, phone=phone.strip())
            teacher.students.add(enrollment.id, name)
            group.students.add(enrollment.id, name)
            await self._store.commit(save=[group, teacher, enrollment])

        logger.info("Student %s joined group %s", enrollment.id, group.id)
        return enrollment

    async def remove_student(self, group_id: str, student_id: str, actor: Actor) -> None:
        require(actor, "students.remove")

        async with self._locks.hold(
            teacher_key(actor.teacher_id), group_key(group_id), enrollment_key(student_id)
        ):
            group = await self._store.load_group(group_id)
            ensure_group_access(group, actor)
            enrollment = await self._store.load_enrollment(student_id)
            ensure_enrollment_access(enrollment, actor)
            if enrollment.group_id != group.id:
                raise NotFound(f"Student {student_id} is not enrolled in group {group_id}")
            teacher = await self._store.load_teacher(actor.teacher_id)

            teacher.students.remove(student_id)
            group.students.remove(student_id)
            await self._store.commit(save=[group, teacher], delete=[enrollment])

        logger.info("Student %s removed from group %s", student_id, group_id)

    async def register_assistant(self, actor: Actor, name: str) -> Assistant:
        require(actor, "assistants.register")
        name = _clean_name(name)

        async with self._locks.hold(teacher_key(actor.teacher_id)):
            teacher = await self._store.load_teacher(actor.teacher_id)
            assistant = Assistant(teacher_id=teacher.id, name=name)
            teacher.assistants.add(assistant.id, name)
            await self._store.commit(save=[assistant, teacher])

        logger.info("Teacher %s registered assistant %s", teacher.id, assistant.id)
        return assistant
