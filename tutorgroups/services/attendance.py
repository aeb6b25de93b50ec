"""Attendance rounds.

Opening a round debits an absence to every student of the group up front;
confirming a student's presence takes the debit back. A student confirmed
in a group that is not their home group is flagged instead, and the flag is
settled when their home group opens its next round.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from tutorgroups.errors import DuplicateAttendanceError, NoOpenRoundError
from tutorgroups.models import Actor, Enrollment, RoundRecord, RoundState, new_id, utcnow
from tutorgroups.services.access import ensure_enrollment_access, ensure_group_access, require
from tutorgroups.services.locks import AggregateLocks, enrollment_key, group_key
from tutorgroups.store import AggregateStore

logger = logging.getLogger(__name__)


def _apply_round(enrollment: Enrollment, opened_at: datetime) -> bool:
    """Debit one student for a new round. Returns False when a guest flag was settled instead."""
    attendance = enrollment.attendance
    if attendance.state == RoundState.PRESENT_ELSEWHERE:
        attendance.state = RoundState.PRESENT
        return False
    enrollment.absence.push(opened_at)
    attendance.state = RoundState.UNCONFIRMED
    return True


class AttendanceRoundEngine:
    def __init__(
        self,
        store: AggregateStore,
        locks: Optional[AggregateLocks] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._locks = locks or AggregateLocks()
        self._clock = clock

    async def open_round(self, group_id: str, actor: Actor) -> RoundRecord:
        require(actor, "attendance.open_round")

        async with self._locks.hold(group_key(group_id)):
            group = await self._store.load_group(group_id)
            ensure_group_access(group, actor)

            # the group lock keeps the roster fixed while the students are locked
            async with self._locks.hold(*(enrollment_key(i) for i in group.students.ids())):
                enrollments = await self._store.find_enrollments_by_group(group_id)

                record = RoundRecord(round_id=new_id(), teacher_id=actor.teacher_id, opened_at=self._clock())
                group.attendance_rounds.push(record)
                debited = sum(_apply_round(e, record.opened_at) for e in enrollments)

                await self._store.commit(save=[group, *enrollments])

        logger.info(
            "Round %s opened for group %s: %d absent pending, %d settled from other groups",
            record.round_id,
            group_id,
            debited,
            len(enrollments) - debited,
        )
        return record

    async def confirm_attendance(self, group_id: str, student_id: str, actor: Actor) -> Enrollment:
        require(actor, "attendance.confirm")

        async with self._locks.hold(group_key(group_id), enrollment_key(student_id)):
            group = await self._store.load_group(group_id)
            ensure_group_access(group, actor)
            enrollment = await self._store.load_enrollment(student_id)
            ensure_enrollment_access(enrollment, actor)

            attendance = enrollment.attendance
            if enrollment.group_id != group.id:
                # the absence debit belongs to the home group's round
                attendance.state = RoundState.PRESENT_ELSEWHERE
            elif attendance.has_recorded_attendance:
                raise DuplicateAttendanceError(f"Student {student_id} already attended this round")
            elif not enrollment.absence.details:
                raise NoOpenRoundError(f"No round has been opened for student {student_id} yet")
            else:
                enrollment.absence.pop()
                attendance.state = RoundState.PRESENT

            attendance.push(self._clock())
            await self._store.commit(save=[enrollment])

        logger.info(
            "Student %s attended group %s%s",
            student_id,
            group_id,
            " as a guest" if enrollment.group_id != group_id else "",
        )
        return enrollment

    async def list_rounds(self, group_id: str, actor: Actor) -> list[RoundRecord]:
        require(actor, "groups.view")
        group = await self._store.load_group(group_id)
        ensure_group_access(group, actor)
        return list(group.attendance_rounds.details)
