"""Groups: roster changes, attendance rounds, payment ledgers and scores."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from tutorgroups.api.deps import CurrentActor, ServicesDep
from tutorgroups.models import Enrollment, Group, RoundRecord, Score, ScoreSettings, Weekday
from tutorgroups.services.scores import StudentScores

router = APIRouter()


class GroupCreateRequest(BaseModel):
    name: str
    day: Optional[Weekday] = None


class StudentAddRequest(BaseModel):
    name: str
    phone: str = ""


class PaymentRequest(BaseModel):
    amount: float = Field(strict=True)


class ScoreRequest(BaseModel):
    score: float = Field(strict=True)
    taken_on: Optional[date] = None


class ScoreLimitRequest(BaseModel):
    value: float = Field(strict=True)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=Group)
async def create_group(data: GroupCreateRequest, actor: CurrentActor, services: ServicesDep):
    return await services.roster.create_group(actor, data.name, data.day)


@router.put("/fees/{fee_kind}", response_model=list[Group])
async def set_fee_amount(fee_kind: str, data: PaymentRequest, actor: CurrentActor, services: ServicesDep):
    """Set the attendance or books price on every group of the teacher."""
    return await services.payments.set_fee_amount(actor, data.amount, fee_kind)


@router.post("/{group_id}/students", status_code=status.HTTP_201_CREATED)
async def add_student(group_id: str, data: StudentAddRequest, actor: CurrentActor, services: ServicesDep):
    enrollment = await services.roster.add_student(group_id, actor, data.name, data.phone)
    return {"code": enrollment.id}


@router.delete("/{group_id}/students/{student_id}")
async def remove_student(group_id: str, student_id: str, actor: CurrentActor, services: ServicesDep):
    await services.roster.remove_student(group_id, student_id, actor)
    return {"status": "success"}


@router.post("/{group_id}/rounds", status_code=status.HTTP_201_CREATED, response_model=RoundRecord)
async def open_round(group_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.attendance.open_round(group_id, actor)


@router.get("/{group_id}/rounds", response_model=list[RoundRecord])
async def list_rounds(group_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.attendance.list_rounds(group_id, actor)


@router.post("/{group_id}/students/{student_id}/attendance", response_model=Enrollment)
async def confirm_attendance(group_id: str, student_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.attendance.confirm_attendance(group_id, student_id, actor)


@router.post("/{group_id}/students/{student_id}/attendance-payments", response_model=Enrollment)
async def pay_attendance_fee(
    group_id: str, student_id: str, data: PaymentRequest, actor: CurrentActor, services: ServicesDep
):
    return await services.payments.pay_attendance_fee(group_id, student_id, data.amount, actor)


@router.delete("/{group_id}/students/{student_id}/attendance-payments", response_model=Enrollment)
async def reverse_attendance_fee(group_id: str, student_id: str, actor: CurrentActor, services: ServicesDep):
    """Undo the most recent attendance payment."""
    return await services.payments.reverse_attendance_fee(group_id, student_id, actor)


@router.post("/{group_id}/students/{student_id}/books-payments", response_model=Enrollment)
async def pay_books_fee(group_id: str, student_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.payments.pay_books_fee(group_id, student_id, actor)


@router.delete("/{group_id}/students/{student_id}/books-payments", response_model=Enrollment)
async def reverse_books_fee(group_id: str, student_id: str, actor: CurrentActor, services: ServicesDep):
    """Undo the most recent books payment."""
    return await services.payments.reverse_books_fee(group_id, student_id, actor)


@router.put("/score-limits/{kind}", response_model=ScoreSettings)
async def set_score_limit(kind: str, data: ScoreLimitRequest, actor: CurrentActor, services: ServicesDep):
    """Set the teacher's max or redo score."""
    return await services.scores.set_score_limit(actor, kind, data.value)


@router.get("/{group_id}/scores", response_model=list[date])
async def score_dates(group_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.scores.score_dates(group_id, actor)


@router.get("/{group_id}/scores/{day}", response_model=list[StudentScores])
async def group_scores_on(group_id: str, day: date, actor: CurrentActor, services: ServicesDep):
    return await services.scores.group_scores_on(group_id, day, actor)


@router.post(
    "/{group_id}/students/{student_id}/scores",
    status_code=status.HTTP_201_CREATED,
    response_model=Score,
)
async def add_score(group_id: str, student_id: str, data: ScoreRequest, actor: CurrentActor, services: ServicesDep):
    return await services.scores.add_score(group_id, student_id, actor, data.score, data.taken_on)


@router.put("/{group_id}/students/{student_id}/scores/{score_id}", response_model=Score)
async def edit_score(
    group_id: str, student_id: str, score_id: str, data: ScoreRequest, actor: CurrentActor, services: ServicesDep
):
    return await services.scores.edit_score(group_id, student_id, score_id, actor, data.score)


@router.delete("/{group_id}/students/{student_id}/scores/{score_id}", response_model=list[Score])
async def delete_score(group_id: str, student_id: str, score_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.scores.delete_score(group_id, student_id, score_id, actor)
