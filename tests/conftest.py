from __future__ import annotations

import asyncio
import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time; keep tests off MongoDB and the prod secret check.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest

from tutorgroups.models import Actor, Assistant, Roster, RosterEntry, Teacher, UserRole
from tutorgroups.services import build_services
from tutorgroups.services.auth import AuthorizationGate
from tutorgroups.store import InMemoryStore


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gate():
    return AuthorizationGate("test-secret")


@pytest.fixture
def store():
    s = InMemoryStore()
    s.add(
        Teacher(
            id="t1",
            name="Mona Adel",
            phone="+201234567890",
            subject="Physics",
            assistants=Roster(details=[RosterEntry(id="a1", name="Sara")]),
        ),
        Teacher(
            id="t2",
            name="Karim Nabil",
            phone="+201098765432",
            subject="Chemistry",
            assistants=Roster(details=[RosterEntry(id="a2", name="Omar")]),
        ),
        Assistant(id="a1", teacher_id="t1", name="Sara"),
        Assistant(id="a2", teacher_id="t2", name="Omar"),
    )
    return s


@pytest.fixture
def services(store, gate, clock):
    return build_services(store, gate, clock=clock)


@pytest.fixture
def teacher_actor():
    return Actor(principal_id="t1", role=UserRole.TEACHER, teacher_id="t1", name="Mona Adel")


@pytest.fixture
def assistant():
    return Actor(principal_id="a1", role=UserRole.ASSISTANT, teacher_id="t1", name="Sara")


@pytest.fixture
def other_assistant():
    return Actor(principal_id="a2", role=UserRole.ASSISTANT, teacher_id="t2", name="Omar")


@pytest.fixture
def two_groups(run, services, assistant):
    """Groups G and H of teacher t1; A enrolled in G, B in H."""
    g = run(services.roster.create_group(assistant, "Group Sat", "sat"))
    h = run(services.roster.create_group(assistant, "Group Tue", "tue"))
    a = run(services.roster.add_student(g.id, assistant, "Ahmed Ali", "01234567890"))
    b = run(services.roster.add_student(h.id, assistant, "Basma Hany", "01234567891"))
    return g, h, a, b
