from __future__ import annotations

import pytest
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import OperationFailure

from tutorgroups.errors import ConcurrentModificationError, NotFound, PersistenceError
from tutorgroups.models import Enrollment, Group, Teacher
from tutorgroups.store.mongo import DOCUMENT_MODELS, GroupDocument, MongoStore


@pytest.fixture
def mongo(run):
    client = AsyncMongoMockClient()
    run(init_beanie(database=client["tutorgroups_test"], document_models=list(DOCUMENT_MODELS.values())))
    return MongoStore(client, transactions=False)


@pytest.fixture
def seeded(run, mongo):
    teacher = Teacher(id="t1", name="Mona Adel", subject="Physics")
    group = Group(name="Group Sat", teacher_id="t1", day="sat")
    teacher.groups.add(group.id, group.name)
    run(mongo.commit(save=[teacher, group]))
    return teacher, group


def test_round_trip_keeps_rosters_and_versions(run, mongo, seeded):
    teacher, group = seeded
    assert (teacher.version, group.version) == (1, 1)

    loaded = run(mongo.load_teacher("t1"))
    assert isinstance(loaded, Teacher)
    assert loaded.name == "Mona Adel"
    assert loaded.groups.names() == ["Group Sat"]
    assert loaded.groups.count == 1
    assert loaded.version == 1

    loaded.subject = "Math"
    run(mongo.save(loaded))
    assert loaded.version == 2
    assert run(mongo.load_teacher("t1")).subject == "Math"

    assert [g.id for g in run(mongo.find_groups_by_teacher("t1"))] == [group.id]


def test_enrollment_ledgers_survive_storage(run, mongo, seeded, clock):
    _, group = seeded
    enrollment = Enrollment(teacher_id="t1", group_id=group.id, name="Ahmed Ali")
    enrollment.attendance_payment.record(50, clock())
    enrollment.attendance_payment.record(30, clock())
    enrollment.books_payment.push(clock())
    run(mongo.save(enrollment))

    loaded = run(mongo.load_enrollment(enrollment.id))

    assert [p.amount for p in loaded.attendance_payment.details] == [30, 50]
    assert loaded.attendance_payment.total_paid == 80
    assert loaded.books_payment.count == 1
    assert [e.id for e in run(mongo.find_enrollments_by_group(group.id))] == [enrollment.id]


def test_missing_document_is_not_found(run, mongo):
    with pytest.raises(NotFound):
        run(mongo.load_group("nope"))


def test_stale_version_rejects_the_whole_batch(run, mongo, seeded):
    _, group = seeded
    first = run(mongo.load_group(group.id))
    second = run(mongo.load_group(group.id))
    first.attendance_fee = 100
    run(mongo.save(first))

    teacher = run(mongo.load_teacher("t1"))
    teacher.subject = "Math"
    second.attendance_fee = 999
    with pytest.raises(ConcurrentModificationError):
        run(mongo.commit(save=[teacher, second]))

    assert second.version == 1
    assert run(mongo.load_group(group.id)).attendance_fee == 100
    assert run(mongo.load_teacher("t1")).subject == "Physics"


def test_delete_in_batch(run, mongo, seeded):
    teacher, group = seeded
    enrollment = Enrollment(teacher_id="t1", group_id=group.id, name="Ahmed Ali")
    run(mongo.save(enrollment))

    teacher = run(mongo.load_teacher("t1"))
    teacher.students.add(enrollment.id, enrollment.name)
    run(mongo.commit(save=[teacher], delete=[run(mongo.load_enrollment(enrollment.id))]))

    assert run(mongo.find_enrollments_by_group(group.id)) == []
    with pytest.raises(NotFound):
        run(mongo.load_enrollment(enrollment.id))


def test_backend_errors_become_persistence_errors(run, mongo, seeded, monkeypatch):
    _, group = seeded

    async def failing(*args, **kwargs):
        raise OperationFailure("write conflict")

    monkeypatch.setattr(GroupDocument, "save", failing)
    loaded = run(mongo.load_group(group.id))
    loaded.books_fee = 20
    with pytest.raises(PersistenceError) as exc_info:
        run(mongo.save(loaded))
    assert not isinstance(exc_info.value, ConcurrentModificationError)
    assert loaded.version == 1

    monkeypatch.setattr(GroupDocument, "get", failing)
    with pytest.raises(PersistenceError):
        run(mongo.load_group(group.id))
