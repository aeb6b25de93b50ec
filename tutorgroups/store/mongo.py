"""MongoDB AggregateStore on Beanie documents.

Each aggregate kind gets a document class that reuses the aggregate's
fields. Commits run inside one multi-document transaction when enabled;
versions are checked inside it so a concurrent writer aborts the batch.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, TypeVar

from beanie import Document
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession
from pymongo.errors import PyMongoError

from tutorgroups.errors import ConcurrentModificationError, NotFound, PersistenceError
from tutorgroups.models import Aggregate, Assistant, Enrollment, Group, Teacher

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Aggregate)


class TeacherDocument(Teacher, Document):
    class Settings:
        name = "teachers"


class AssistantDocument(Assistant, Document):
    class Settings:
        name = "assistants"
        indexes = ["teacher_id"]


class GroupDocument(Group, Document):
    class Settings:
        name = "groups"
        indexes = ["teacher_id"]


class EnrollmentDocument(Enrollment, Document):
    class Settings:
        name = "enrollments"
        indexes = ["teacher_id", "group_id"]


DOCUMENT_MODELS: dict[type[Aggregate], type[Document]] = {
    Teacher: TeacherDocument,
    Assistant: AssistantDocument,
    Group: GroupDocument,
    Enrollment: EnrollmentDocument,
}


def _to_aggregate(kind: type[A], document: Document) -> A:
    return kind.model_validate(document.model_dump(exclude={"revision_id"}))


def _to_document(aggregate: Aggregate, version: int) -> Document:
    data = aggregate.model_dump()
    data["version"] = version
    return DOCUMENT_MODELS[type(aggregate)].model_validate(data)


class MongoStore:
    def __init__(self, client: AsyncIOMotorClient, *, transactions: bool = True):
        self._client = client
        self._transactions = transactions

    async def _get(self, kind: type[A], aggregate_id: str) -> A:
        try:
            document = await DOCUMENT_MODELS[kind].get(aggregate_id)
        except PyMongoError as e:
            logger.error("Loading %s %s failed: %s", kind.__name__, aggregate_id, e)
            raise PersistenceError(f"Failed to load {kind.__name__} {aggregate_id}") from e
        if document is None:
            raise NotFound(f"{kind.__name__} {aggregate_id} not found")
        return _to_aggregate(kind, document)

    async def _find(self, kind: type[A], query: dict) -> list[A]:
        try:
            documents = await DOCUMENT_MODELS[kind].find(query).to_list()
        except PyMongoError as e:
            logger.error("Querying %s %s failed: %s", kind.__name__, query, e)
            raise PersistenceError(f"Failed to query {kind.__name__}") from e
        return [_to_aggregate(kind, d) for d in documents]

    async def load_teacher(self, teacher_id: str) -> Teacher:
        return await self._get(Teacher, teacher_id)

    async def load_assistant(self, assistant_id: str) -> Assistant:
        return await self._get(Assistant, assistant_id)

    async def load_group(self, group_id: str) -> Group:
        return await self._get(Group, group_id)

    async def load_enrollment(self, enrollment_id: str) -> Enrollment:
        return await self._get(Enrollment, enrollment_id)

    async def find_enrollments_by_group(self, group_id: str) -> list[Enrollment]:
        return await self._find(Enrollment, {"group_id": group_id})

    async def find_groups_by_teacher(self, teacher_id: str) -> list[Group]:
        return await self._find(Group, {"teacher_id": teacher_id})

    async def _current(
        self, aggregate: Aggregate, session: Optional[AsyncIOMotorClientSession]
    ) -> Optional[Document]:
        document = await DOCUMENT_MODELS[type(aggregate)].get(aggregate.id, session=session)
        expected = document.version if document is not None else 0
        if aggregate.version != expected:
            raise ConcurrentModificationError(
                f"{type(aggregate).__name__} {aggregate.id} changed since it was loaded",
                expected=expected,
                found=aggregate.version,
            )
        return document

    async def _apply(
        self,
        save: Sequence[Aggregate],
        delete: Sequence[Aggregate],
        session: Optional[AsyncIOMotorClientSession],
    ) -> None:
        for aggregate in save:
            await self._current(aggregate, session)
        doomed = [await self._current(aggregate, session) for aggregate in delete]

        for aggregate in save:
            await _to_document(aggregate, aggregate.version + 1).save(session=session)
        for document in doomed:
            if document is not None:
                await document.delete(session=session)

    async def commit(
        self,
        save: Sequence[Aggregate] = (),
        delete: Sequence[Aggregate] = (),
    ) -> None:
        try:
            if self._transactions:
                async with await self._client.start_session() as session:
                    async with session.start_transaction():
                        await self._apply(save, delete, session)
            else:
                await self._apply(save, delete, None)
        except PyMongoError as e:
            logger.error("Commit of %d saves, %d deletes failed: %s", len(save), len(delete), e)
            raise PersistenceError("Failed to save changes") from e

        for aggregate in save:
            aggregate.version += 1

    async def save(self, aggregate: Aggregate) -> None:
        await self.commit(save=[aggregate])
