"""Service wiring: one store and one lock table shared by every service."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from tutorgroups.models import utcnow
from tutorgroups.services.access import AccessGuard
from tutorgroups.services.attendance import AttendanceRoundEngine
from tutorgroups.services.auth import AuthorizationGate
from tutorgroups.services.locks import AggregateLocks
from tutorgroups.services.payments import PaymentLedger
from tutorgroups.services.roster import RosterCoordinator
from tutorgroups.services.scores import ScoreBook
from tutorgroups.store import AggregateStore


@dataclass(frozen=True)
class Services:
    store: AggregateStore
    locks: AggregateLocks
    gate: AuthorizationGate
    guard: AccessGuard
    roster: RosterCoordinator
    attendance: AttendanceRoundEngine
    payments: PaymentLedger
    scores: ScoreBook


def build_services(
    store: AggregateStore,
    gate: AuthorizationGate,
    *,
    clock: Callable[[], datetime] = utcnow,
) -> Services:
    locks = AggregateLocks()
    return Services(
        store=store,
        locks=locks,
        gate=gate,
        guard=AccessGuard(gate, store),
        roster=RosterCoordinator(store, locks),
        attendance=AttendanceRoundEngine(store, locks, clock=clock),
        payments=PaymentLedger(store, locks, clock=clock),
        scores=ScoreBook(store, locks, clock=clock),
    )
