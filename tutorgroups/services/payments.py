"""Attendance-fee and books-fee ledgers, and the fee prices on groups."""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Callable, Optional

from tutorgroups.errors import InvalidAmountError, InvalidFeeKindError, NothingToReverseError
from tutorgroups.models import Actor, Enrollment, FeeKind, Group, utcnow
from tutorgroups.services.access import ensure_enrollment_access, ensure_group_access, require
from tutorgroups.services.locks import AggregateLocks, enrollment_key, group_key, teacher_key
from tutorgroups.store import AggregateStore

logger = logging.getLogger(__name__)


def _validate_amount(amount: float, *, allow_zero: bool = False) -> float:
    if isinstance(amount, bool):
        raise InvalidAmountError("Amount must be a number")
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise InvalidAmountError("Amount must be a number")
    if not math.isfinite(amount):
        raise InvalidAmountError("Amount must be a finite number")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmountError(
            "Amount must not be negative" if allow_zero else "Amount must be greater than zero"
        )
    return amount


def _parse_fee_kind(fee_kind: str | FeeKind) -> FeeKind:
    try:
        return FeeKind(fee_kind)
    except ValueError:
        raise InvalidFeeKindError(f"Unknown fee kind {fee_kind!r}, expected 'attendance' or 'books'")


class PaymentLedger:
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

    async def _load_student(self, group_id: str, student_id: str, actor: Actor) -> Enrollment:
        group = await self._store.load_group(group_id)
        ensure_group_access(group, actor)
        enrollment = await self._store.load_enrollment(student_id)
        ensure_enrollment_access(enrollment, actor)
        return enrollment

    async def pay_attendance_fee(self, group_id: str, student_id: str, amount: float, actor: Actor) -> Enrollment:
        require(actor, "payments.record")
        amount = _validate_amount(amount)

        async with self._locks.hold(enrollment_key(student_id)):
            enrollment = await self._load_student(group_id, student_id, actor)
            enrollment.attendance_payment.record(amount, self._clock())
            await self._store.commit(save=[enrollment])

        logger.info("Student %s paid %.2f attendance fee", student_id, amount)
        return enrollment

    async def reverse_attendance_fee(self, group_id: str, student_id: str, actor: Actor) -> Enrollment:
        require(actor, "payments.reverse")

        async with self._locks.hold(enrollment_key(student_id)):
            enrollment = await self._load_student(group_id, student_id, actor)
            ledger = enrollment.attendance_payment
            if ledger.count == 0 or ledger.total_paid == 0:
                raise NothingToReverseError(f"Student {student_id} has no attendance payment to reverse")
            payment = ledger.reverse()
            await self._store.commit(save=[enrollment])

        logger.info("Reversed %.2f attendance payment of student %s", payment.amount, student_id)
        return enrollment

    async def pay_books_fee(self, group_id: str, student_id: str, actor: Actor) -> Enrollment:
        require(actor, "payments.record")

        async with self._locks.hold(enrollment_key(student_id)):
            enrollment = await self._load_student(group_id, student_id, actor)
            enrollment.books_payment.push(self._clock())
            await self._store.commit(save=[enrollment])

        logger.info("Student %s paid books fee", student_id)
        return enrollment

    async def reverse_books_fee(self, group_id: str, student_id: str, actor: Actor) -> Enrollment:
        require(actor, "payments.reverse")

        async with self._locks.hold(enrollment_key(student_id)):
            enrollment = await self._load_student(group_id, student_id, actor)
            if enrollment.books_payment.count == 0:
                raise NothingToReverseError(f"Student {student_id} has no books payment to reverse")
            enrollment.books_payment.pop()
            await self._store.commit(save=[enrollment])

        logger.info("Reversed books payment of student %s", student_id)
        return enrollment

    async def set_fee_amount(self, actor: Actor, amount: float, fee_kind: str | FeeKind) -> list[Group]:
        """Set the attendance or books price on every group of the actor's teacher."""
        require(actor, "fees.configure")
        kind = _parse_fee_kind(fee_kind)
        amount = _validate_amount(amount, allow_zero=True)

        async with self._locks.hold(teacher_key(actor.teacher_id)):
            found = await self._store.find_groups_by_teacher(actor.teacher_id)
            async with self._locks.hold(*(group_key(g.id) for g in found)):
                groups = await self._store.find_groups_by_teacher(actor.teacher_id)
                for group in groups:
                    group.set_fee(kind, amount)
                await self._store.commit(save=groups)

        logger.info("Teacher %s set %s fee to %.2f on %d groups", actor.teacher_id, kind.value, amount, len(groups))
        return groups

    async def get_student_details(self, student_id: str, actor: Actor) -> Enrollment:
        require(actor, "students.view")
        enrollment = await self._store.load_enrollment(student_id)
        ensure_enrollment_access(enrollment, actor)
        return enrollment
