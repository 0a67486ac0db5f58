import datetime as dt

from crew_scheduling.greedy import hours_in_range, plan_shifts, rest_ok
from crew_scheduling.models import Assignment, CrewMember, LeaveRecord, ShiftTemplate
from crew_scheduling.utils import UTC, generate_days

JAN1 = dt.date(2025, 1, 1)


def _assignment(crew_id, start, end, day=JAN1):
    return Assignment(date=day, shift_id="x", crew_id=crew_id,
                      start=start.replace(tzinfo=UTC), end=end.replace(tzinfo=UTC))


def test_home_vessel_crew_first_then_rank():
    shifts = [ShiftTemplate(id="s", vessel_id="V1", start="08:00", end="16:00", needed=2)]
    crew = [
        CrewMember(id="floater", rank="Able Seaman"),
        CrewMember(id="home2", rank="Deck Officer", vessel_id="V1"),
        CrewMember(id="home1", rank="Chief Officer", vessel_id="V1"),
    ]
    result = plan_shifts([JAN1], shifts, crew, [])
    assert [a.crew_id for a in result.scheduled] == ["home1", "home2"]
    assert result.unfilled == []


def test_skips_inactive_other_vessel_and_leave():
    shifts = [ShiftTemplate(id="s", vessel_id="V1", start="08:00", end="16:00", needed=4, skill_required="deck")]
    crew = [
        CrewMember(id="inactive", skills=["deck"], active=False),
        CrewMember(id="elsewhere", skills=["deck"], vessel_id="V2"),
        CrewMember(id="away", skills=["deck"]),
        CrewMember(id="noskill", skills=[]),
        CrewMember(id="ok", skills=["deck"]),
    ]
    leaves = [LeaveRecord(crew_id="away", start=dt.datetime(2025, 1, 1, 15), end=dt.datetime(2025, 1, 2))]
    result = plan_shifts([JAN1], shifts, crew, leaves)

    assert [a.crew_id for a in result.scheduled] == ["ok"]
    assert [(u.need, u.reason) for u in result.unfilled] == [(3, "insufficient crew for constraints")]


def test_rest_and_weekly_hours():
    existing = [_assignment("a", dt.datetime(2025, 1, 1, 0), dt.datetime(2025, 1, 1, 4))]
    assert not rest_ok(existing, "a", dt.datetime(2025, 1, 1, 10, tzinfo=UTC), 10)
    assert rest_ok(existing, "a", dt.datetime(2025, 1, 1, 14, tzinfo=UTC), 10)
    assert rest_ok(existing, "b", dt.datetime(2025, 1, 1, 5, tzinfo=UTC), 10)

    window_start = dt.datetime(2024, 12, 31, 2, tzinfo=UTC)
    window_end = dt.datetime(2025, 1, 1, 2, tzinfo=UTC)
    assert hours_in_range(existing, "a", window_start, window_end) == 2


def test_max_hours_in_rolling_week():
    days = generate_days(JAN1, 7)
    shifts = [ShiftTemplate(id="long", start="06:00", end="18:00")]
    crew = [CrewMember(id="a", max_hours_7d=40)]
    result = plan_shifts(days, shifts, crew, [])
    # 12h shifts: three fit under 40h, the fourth would make 48h
    assert len(result.scheduled) == 3
    assert len(result.unfilled) == 4


def test_existing_assignments_are_returned():
    existing = [_assignment("a", dt.datetime(2024, 12, 31, 8), dt.datetime(2024, 12, 31, 16),
                            day=dt.date(2024, 12, 31))]
    shifts = [ShiftTemplate(id="s", start="08:00", end="16:00")]
    result = plan_shifts([JAN1], shifts, [CrewMember(id="a")], [], existing)
    assert result.scheduled[0] == existing[0]
    assert len(result.scheduled) == 2


def test_one_shift_per_day():
    shifts = [
        ShiftTemplate(id="early", start="00:00", end="04:00"),
        ShiftTemplate(id="late", start="16:00", end="20:00"),
    ]
    result = plan_shifts([JAN1], shifts, [CrewMember(id="a")], [])
    assert [a.shift_id for a in result.scheduled] == ["early"]
    assert [u.shift_id for u in result.unfilled] == ["late"]


def test_rank_order_ignores_case():
    shifts = [ShiftTemplate(id="s", start="08:00", end="16:00")]
    crew = [
        CrewMember(id="officer", rank="Deck Officer"),
        CrewMember(id="seaman", rank="able seaman"),
    ]
    result = plan_shifts([JAN1], shifts, crew, [])
    assert [a.crew_id for a in result.scheduled] == ["seaman"]
