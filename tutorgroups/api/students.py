"""Student details and scores for the teacher and their assistants."""
from fastapi import APIRouter

from tutorgroups.api.deps import CurrentActor, ServicesDep
from tutorgroups.models import Enrollment, Score

router = APIRouter()


@router.get("/{student_id}", response_model=Enrollment)
async def get_student_details(student_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.payments.get_student_details(student_id, actor)


@router.get("/{student_id}/scores", response_model=list[Score])
async def get_scores(student_id: str, actor: CurrentActor, services: ServicesDep):
    return await services.scores.get_scores(student_id, actor)
