"""Actor resolution and the ownership checks every operation starts with."""
from __future__ import annotations

import logging
from typing import Optional

from tutorgroups.errors import Forbidden, NotFound, Unauthorized
from tutorgroups.models import Actor, Enrollment, Group, UserRole
from tutorgroups.rbac import Action, has_permission
from tutorgroups.services.auth import AuthorizationGate
from tutorgroups.store import AggregateStore

logger = logging.getLogger(__name__)


class AccessGuard:
    def __init__(self, gate: AuthorizationGate, store: AggregateStore):
        self._gate = gate
        self._store = store

    async def resolve(self, token: Optional[str]) -> Actor:
        """Authorize the token and find the teacher the principal acts for."""
        principal = self._gate.authorize(token)
        try:
            if principal.role == UserRole.TEACHER:
                teacher = await self._store.load_teacher(principal.principal_id)
                return Actor(principal.principal_id, principal.role, teacher.id, teacher.name)
            assistant = await self._store.load_assistant(principal.principal_id)
        except NotFound:
            raise Unauthorized("User not found")
        return Actor(principal.principal_id, principal.role, assistant.teacher_id, assistant.name)


def require(actor: Actor, action: Action) -> None:
    if not has_permission(actor.role.value, action):
        logger.warning("%s %s lacks %s", actor.role.value, actor.principal_id, action)
        raise Forbidden(f"Missing {action} permission")


def ensure_group_access(group: Group, actor: Actor) -> None:
    if group.teacher_id != actor.teacher_id:
        logger.warning("%s %s denied group %s", actor.role.value, actor.principal_id, group.id)
        raise Forbidden("This group belongs to another teacher")


def ensure_enrollment_access(enrollment: Enrollment, actor: Actor) -> None:
    if enrollment.teacher_id != actor.teacher_id:
        logger.warning("%s %s denied student %s", actor.role.value, actor.principal_id, enrollment.id)
        raise Forbidden("This student belongs to another teacher")
