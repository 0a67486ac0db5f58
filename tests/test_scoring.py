import datetime as dt

from crew_scheduling.models import Assignment, CrewMember, CrewPreference, PenaltyWeights, SchedulingRules
from crew_scheduling.run_state import RunState
from crew_scheduling.scoring import (
    consecutive_night_penalty,
    fairness_penalty,
    night_overage_penalty,
    preference_penalty,
    score_candidates,
)
from crew_scheduling.utils import shift_window

DAY = dt.date(2025, 1, 2)
WEIGHTS = PenaltyWeights()
RULES = SchedulingRules()


def _state(counts):
    crew = [CrewMember(id=crew_id) for crew_id in counts]
    state = RunState.for_crew(crew)
    state.assignment_counts.update(counts)
    return crew, state


def test_fairness_prefers_least_loaded():
    # Counts [0, 0, 3]: average 1, so only the loaded crew member pays
    crew, state = _state({"c": 3, "a": 0, "b": 0})
    assert fairness_penalty("c", state, WEIGHTS) == 40
    assert fairness_penalty("a", state, WEIGHTS) == 0

    ranked = score_candidates(crew, DAY, "V1", False, state, WEIGHTS, RULES, {})
    assert [r.crew.id for r in ranked[:2]] == ["a", "b"]
    assert ranked[2].crew.id == "c"


def test_ties_keep_input_order():
    crew, state = _state({"x": 0, "y": 0, "z": 0})
    ranked = score_candidates(crew, DAY, "V1", False, state, WEIGHTS, RULES, {})
    assert [r.crew.id for r in ranked] == ["x", "y", "z"]


def test_night_overage_only_at_cap():
    _, state = _state({"a": 0})
    state.night_counts["a"] = 3
    assert night_overage_penalty("a", True, state, WEIGHTS, RULES) == 0
    state.night_counts["a"] = 5
    assert night_overage_penalty("a", True, state, WEIGHTS, RULES) == 20
    assert night_overage_penalty("a", False, state, WEIGHTS, RULES) == 0


def test_consecutive_night_penalty():
    crew, state = _state({"a": 0, "b": 0})
    yesterday = DAY - dt.timedelta(days=1)
    start, end = shift_window(yesterday, dt.time(22), dt.time(6))
    state.commit(Assignment(date=yesterday, shift_id="n", crew_id="a", start=start, end=end), is_night=True)

    assert consecutive_night_penalty("a", DAY, True, state, WEIGHTS) == 8
    assert consecutive_night_penalty("b", DAY, True, state, WEIGHTS) == 0
    assert consecutive_night_penalty("a", DAY, False, state, WEIGHTS) == 0

    # a: fairness (1 - 0.5) * 20 + consecutive 8
    ranked = score_candidates(crew, DAY, "V1", True, state, WEIGHTS, RULES, {})
    assert [(r.crew.id, r.penalty) for r in ranked] == [("b", 0), ("a", 18)]


def test_preference_penalties():
    pref = CrewPreference(crew_id="a", days_off=["2025-01-02"], prefer_vessel="V2")
    assert preference_penalty(DAY, "V1", pref, WEIGHTS) == 9
    assert preference_penalty(DAY, "V2", pref, WEIGHTS) == 6
    assert preference_penalty(DAY + dt.timedelta(days=1), "", pref, WEIGHTS) == 0
    assert preference_penalty(DAY, "V1", None, WEIGHTS) == 0
