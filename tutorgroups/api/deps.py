"""Shared dependencies: service container and bearer-token actor."""
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tutorgroups.models import Actor
from tutorgroups.services import Services

security = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    return request.app.state.services


async def get_current_actor(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Actor:
    token = credentials.credentials if credentials else None
    return await get_services(request).guard.resolve(token)


# Type aliases for route injection
ServicesDep = Annotated[Services, Depends(get_services)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
