"""Quiz scores recorded against a student's home group.

Each score keeps the max and redo marks that were in force when it was
taken, so changing a teacher's limits never rewrites past results.
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Callable, Optional

from pydantic import BaseModel

from tutorgroups.errors import InvalidScoreError, NotFound, ValidationError
from tutorgroups.models import Actor, Enrollment, Score, ScoreLimit, ScoreSettings, utcnow
from tutorgroups.services.access import ensure_enrollment_access, ensure_group_access, require
from tutorgroups.services.locks import AggregateLocks, enrollment_key, teacher_key
from tutorgroups.store import AggregateStore

logger = logging.getLogger(__name__)


class StudentScores(BaseModel):
    student_id: str
    name: str
    scores: list[Score]


def _as_number(value: float, what: str) -> float:
    if isinstance(value, bool):
        raise InvalidScoreError(f"{what} must be a number")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidScoreError(f"{what} must be a number")
    if not math.isfinite(value):
        raise InvalidScoreError(f"{what} must be a finite number")
    return value


def _validate_score(value: float, max_score: float) -> float:
    value = _as_number(value, "Score")
    if not 0 <= value <= max_score:
        raise InvalidScoreError(f"Score must be between 0 and {max_score:g}")
    return value


def _parse_limit(kind: str | ScoreLimit) -> ScoreLimit:
    try:
        return ScoreLimit(kind)
    except ValueError:
        raise ValidationError(f"Unknown score limit {kind!r}, expected 'max' or 'redo'")


class ScoreBook:
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

    async def _load_home_student(self, group_id: str, student_id: str, actor: Actor) -> Enrollment:
        group = await self._store.load_group(group_id)
        ensure_group_access(group, actor)
        enrollment = await self._store.load_enrollment(student_id)
        ensure_enrollment_access(enrollment, actor)
        if enrollment.group_id != group.id:
            raise NotFound(f"Student {student_id} is not enrolled in group {group_id}")
        return enrollment

    async def set_score_limit(self, actor: Actor, kind: str | ScoreLimit, value: float) -> ScoreSettings:
        """Set the teacher's max or redo mark for scores recorded from now on."""
        require(actor, "scores.configure")
        limit = _parse_limit(kind)
        value = _as_number(value, "Limit")

        async with self._locks.hold(teacher_key(actor.teacher_id)):
            teacher = await self._store.load_teacher(actor.teacher_id)
            settings = teacher.score_settings
            if limit == ScoreLimit.MAX and value <= 0:
                raise InvalidScoreError("Max score must be greater than zero")
            if limit == ScoreLimit.MAX and value < settings.redo_score:
                raise InvalidScoreError(f"Max score must not be below the redo score {settings.redo_score:g}")
            if limit == ScoreLimit.REDO and not 0 <= value <= settings.max_score:
                raise InvalidScoreError(f"Redo score must be between 0 and {settings.max_score:g}")
            setattr(settings, limit.field_name, value)
            await self._store.commit(save=[teacher])

        logger.info("Teacher %s set %s score to %g", actor.teacher_id, limit.value, value)
        return settings

    async def add_score(
        self,
        group_id: str,
        student_id: str,
        actor: Actor,
        score: float,
        taken_on: Optional[date] = None,
    ) -> Score:
        require(actor, "scores.record")
        settings = (await self._store.load_teacher(actor.teacher_id)).score_settings
        value = _validate_score(score, settings.max_score)

        async with self._locks.hold(enrollment_key(student_id)):
            enrollment = await self._load_home_student(group_id, student_id, actor)
            now = self._clock()
            entry = Score(
                group_id=group_id,
                score=value,
                max_score=settings.max_score,
                redo_score=settings.redo_score,
                taken_on=taken_on or now.date(),
                recorded_at=now,
            )
            enrollment.scores.push(entry)
            await self._store.commit(save=[enrollment])

        logger.info("Student %s scored %g/%g on %s", student_id, value, entry.max_score, entry.taken_on)
        return entry

    async def edit_score(self, group_id: str, student_id: str, score_id: str, actor: Actor, score: float) -> Score:
        require(actor, "scores.record")

        async with self._locks.hold(enrollment_key(student_id)):
            enrollment = await self._load_home_student(group_id, student_id, actor)
            entry = enrollment.scores.find(score_id)
            if entry is None:
                raise NotFound(f"Score {score_id} not found")
            entry.score = _validate_score(score, entry.max_score)
            await self._store.commit(save=[enrollment])

        logger.info("Score %s of student %s changed to %g", score_id, student_id, entry.score)
        return entry

    async def delete_score(self, group_id: str, student_id: str, score_id: str, actor: Actor) -> list[Score]:
        require(actor, "scores.record")

        async with self._locks.hold(enrollment_key(student_id)):
            enrollment = await self._load_home_student(group_id, student_id, actor)
            if not enrollment.scores.remove(score_id):
                raise NotFound(f"Score {score_id} not found")
            await self._store.commit(save=[enrollment])

        logger.info("Score %s of student %s deleted", score_id, student_id)
        return enrollment.scores.details

    async def get_scores(self, student_id: str, actor: Actor) -> list[Score]:
        require(actor, "scores.view")
        enrollment = await self._store.load_enrollment(student_id)
        ensure_enrollment_access(enrollment, actor)
        return enrollment.scores.details

    async def _group_students(self, group_id: str, actor: Actor) -> list[Enrollment]:
        group = await self._store.load_group(group_id)
        ensure_group_access(group, actor)
        order = {student_id: i for i, student_id in enumerate(group.students.ids())}
        enrollments = await self._store.find_enrollments_by_group(group_id)
        return sorted(enrollments, key=lambda e: order.get(e.id, len(order)))

    async def score_dates(self, group_id: str, actor: Actor) -> list[date]:
        """Days on which the group's students have scores, most recent first."""
        require(actor, "scores.view")
        days = {s.taken_on for e in await self._group_students(group_id, actor) for s in e.scores.details}
        return sorted(days, reverse=True)

    async def group_scores_on(self, group_id: str, day: date, actor: Actor) -> list[StudentScores]:
        """Every student on the group's roster with the scores they took on ``day``."""
        require(actor, "scores.view")
        return [
            StudentScores(student_id=e.id, name=e.name, scores=e.scores.taken_on(day))
            for e in await self._group_students(group_id, actor)
        ]
