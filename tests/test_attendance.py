from __future__ import annotations

import asyncio

import pytest

from tutorgroups.errors import DuplicateAttendanceError, Forbidden, NoOpenRoundError, NotFound
from tutorgroups.models import RoundState


def test_open_round_debits_every_home_student(run, services, store, assistant, two_groups, clock):
    g, h, a, b = two_groups
    extra = run(services.roster.add_student(g.id, assistant, "Hala Samir", "01234567892"))

    record = run(services.attendance.open_round(g.id, assistant))

    group = run(store.load_group(g.id))
    assert group.attendance_rounds.count == 1
    assert group.attendance_rounds.latest == record
    assert record.teacher_id == "t1"

    for student_id in (a.id, extra.id):
        s = run(store.load_enrollment(student_id))
        assert s.absence.count == 1
        assert s.absence.details == [record.opened_at]
        assert s.attendance.has_recorded_attendance is False

    untouched = run(store.load_enrollment(b.id))
    assert untouched.absence.count == 0


def test_rounds_are_logged_most_recent_first(run, services, store, assistant, two_groups):
    g, _, a, _ = two_groups
    first = run(services.attendance.open_round(g.id, assistant))
    second = run(services.attendance.open_round(g.id, assistant))

    rounds = run(services.attendance.list_rounds(g.id, assistant))
    assert [r.round_id for r in rounds] == [second.round_id, first.round_id]
    assert first.round_id != second.round_id

    s = run(store.load_enrollment(a.id))
    assert s.absence.details == [second.opened_at, first.opened_at]


def test_confirm_home_attendance_reverses_the_debit(run, services, store, assistant, two_groups):
    g, _, a, _ = two_groups
    run(services.attendance.open_round(g.id, assistant))

    updated = run(services.attendance.confirm_attendance(g.id, a.id, assistant))

    assert updated.absence.count == 0
    assert updated.attendance.count == 1
    assert updated.attendance.has_recorded_attendance is True
    assert updated.attendance.attended_from_another_group is False
    assert run(store.load_enrollment(a.id)) == updated


def test_confirm_only_removes_the_latest_absence(run, services, store, assistant, two_groups):
    g, _, a, _ = two_groups
    first = run(services.attendance.open_round(g.id, assistant))
    run(services.attendance.open_round(g.id, assistant))

    updated = run(services.attendance.confirm_attendance(g.id, a.id, assistant))

    assert updated.absence.details == [first.opened_at]


def test_double_confirmation_fails_and_keeps_state(run, services, store, assistant, two_groups):
    g, _, a, _ = two_groups
    run(services.attendance.open_round(g.id, assistant))
    after_first = run(services.attendance.confirm_attendance(g.id, a.id, assistant))

    with pytest.raises(DuplicateAttendanceError):
        run(services.attendance.confirm_attendance(g.id, a.id, assistant))

    assert run(store.load_enrollment(a.id)) == after_first


def test_new_round_allows_confirming_again(run, services, assistant, two_groups):
    g, _, a, _ = two_groups
    run(services.attendance.open_round(g.id, assistant))
    run(services.attendance.confirm_attendance(g.id, a.id, assistant))
    run(services.attendance.open_round(g.id, assistant))

    updated = run(services.attendance.confirm_attendance(g.id, a.id, assistant))

    assert updated.absence.count == 0
    assert updated.attendance.count == 2


def test_guest_attendance_is_settled_at_next_home_round(run, services, store, assistant, two_groups):
    g, h, a, b = two_groups

    run(services.attendance.open_round(g.id, assistant))
    assert run(store.load_enrollment(a.id)).absence.count == 1
    assert run(store.load_enrollment(b.id)).absence.count == 0

    a_after = run(services.attendance.confirm_attendance(g.id, a.id, assistant))
    assert a_after.absence.count == 0
    assert a_after.attendance.count == 1
    assert a_after.attendance.has_recorded_attendance is True

    b_guest = run(services.attendance.confirm_attendance(g.id, b.id, assistant))
    assert b_guest.attendance.attended_from_another_group is True
    assert b_guest.absence.count == 0
    assert b_guest.attendance.count == 1

    run(services.attendance.open_round(h.id, assistant))
    b_after = run(store.load_enrollment(b.id))
    assert b_after.attendance.attended_from_another_group is False
    assert b_after.absence.count == 0
    assert b_after.attendance.state == RoundState.PRESENT


def test_guest_attendance_keeps_pending_home_absence(run, services, store, assistant, two_groups):
    g, h, _, b = two_groups
    home_round = run(services.attendance.open_round(h.id, assistant))

    b_guest = run(services.attendance.confirm_attendance(g.id, b.id, assistant))

    assert b_guest.absence.details == [home_round.opened_at]
    assert b_guest.attendance.state == RoundState.PRESENT_ELSEWHERE


def test_round_touches_each_student_exactly_once(run, services, store, assistant, two_groups):
    g, h, _, b = two_groups
    guest = run(services.roster.add_student(h.id, assistant, "Yara Fathy", "01234567893"))
    run(services.attendance.open_round(h.id, assistant))
    run(services.attendance.confirm_attendance(g.id, guest.id, assistant))

    before = {s.id: s for s in run(store.find_enrollments_by_group(h.id))}
    run(services.attendance.open_round(h.id, assistant))
    after = {s.id: s for s in run(store.find_enrollments_by_group(h.id))}

    for student_id, old in before.items():
        new = after[student_id]
        debited = new.absence.count == old.absence.count + 1
        settled = old.attendance.attended_from_another_group and not new.attendance.attended_from_another_group
        assert debited != settled

    assert after[guest.id].absence.count == before[guest.id].absence.count
    assert after[b.id].absence.count == before[b.id].absence.count + 1


def test_confirm_before_any_round_is_rejected(run, services, store, assistant, two_groups):
    g, _, a, _ = two_groups
    before = run(store.load_enrollment(a.id))

    with pytest.raises(NoOpenRoundError):
        run(services.attendance.confirm_attendance(g.id, a.id, assistant))

    assert run(store.load_enrollment(a.id)) == before


def test_other_teachers_assistant_cannot_open_rounds(run, services, store, other_assistant, two_groups):
    g, _, a, _ = two_groups

    with pytest.raises(Forbidden):
        run(services.attendance.open_round(g.id, other_assistant))

    assert run(store.load_group(g.id)).attendance_rounds.count == 0
    assert run(store.load_enrollment(a.id)).absence.count == 0


def test_confirm_unknown_student_is_not_found(run, services, assistant, two_groups):
    g, _, _, _ = two_groups
    with pytest.raises(NotFound):
        run(services.attendance.confirm_attendance(g.id, "missing", assistant))


def test_concurrent_confirmations_record_once(services, store, assistant, two_groups, run):
    g, _, a, _ = two_groups
    run(services.attendance.open_round(g.id, assistant))

    async def race():
        return await asyncio.gather(
            *(services.attendance.confirm_attendance(g.id, a.id, assistant) for _ in range(5)),
            return_exceptions=True,
        )

    results = run(race())

    assert sum(not isinstance(r, Exception) for r in results) == 1
    assert all(isinstance(r, DuplicateAttendanceError) for r in results if isinstance(r, Exception))
    s = run(store.load_enrollment(a.id))
    assert s.attendance.count == 1
    assert s.absence.count == 0
    assert len(services.locks) == 0


def test_round_open_and_confirm_do_not_interleave(services, store, assistant, two_groups, run):
    g, _, a, _ = two_groups
    run(services.attendance.open_round(g.id, assistant))

    async def race():
        return await asyncio.gather(
            services.attendance.confirm_attendance(g.id, a.id, assistant),
            services.attendance.open_round(g.id, assistant),
            return_exceptions=True,
        )

    results = run(race())

    assert not any(isinstance(r, Exception) for r in results)
    s = run(store.load_enrollment(a.id))
    # confirm ran first and removed round one's debit, then round two debited again
    assert s.absence.count == 1
    assert s.attendance.state == RoundState.UNCONFIRMED
