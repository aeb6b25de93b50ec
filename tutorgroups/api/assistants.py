"""Teachers register the assistants that act on their behalf."""
from fastapi import APIRouter, status
from pydantic import BaseModel

from tutorgroups.api.deps import CurrentActor, ServicesDep
from tutorgroups.models import Assistant

router = APIRouter()


class AssistantCreateRequest(BaseModel):
    name: str


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=Assistant)
async def register_assistant(data: AssistantCreateRequest, actor: CurrentActor, services: ServicesDep):
    return await services.roster.register_assistant(actor, data.name)
