"""
Soft-constraint penalties used to rank eligible candidates. Lower is better.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from crew_scheduling.models import CrewMember, CrewPreference, PenaltyWeights, SchedulingRules
from crew_scheduling.run_state import RunState


@dataclass(frozen=True)
class ScoredCandidate:
    crew: CrewMember
    penalty: float


def fairness_penalty(crew_id: str, state: RunState, weights: PenaltyWeights) -> float:
    """Penalize crew already above the roster-wide average assignment count."""
    excess = state.assignments_for(crew_id) - state.average_assignments()
    return max(0.0, excess) * weights.fairness


def night_overage_penalty(crew_id: str, is_night: bool, state: RunState,
                          weights: PenaltyWeights, rules: SchedulingRules) -> float:
    # Only reachable when the eligibility night cap is relaxed
    if not is_night:
        return 0.0
    night_count = state.nights_for(crew_id)
    if night_count < rules.max_nights_per_week:
        return 0.0
    return (night_count - rules.max_nights_per_week + 1) * weights.night_over


def consecutive_night_penalty(crew_id: str, day: dt.date, is_night: bool,
                              state: RunState, weights: PenaltyWeights) -> float:
    if not is_night:
        return 0.0
    if state.worked_night_on(crew_id, day - dt.timedelta(days=1)):
        return weights.consec_night
    return 0.0


def preference_penalty(day: dt.date, vessel_id: str, pref: Optional[CrewPreference],
                       weights: PenaltyWeights) -> float:
    if pref is None:
        return 0.0
    penalty = 0.0
    if day in pref.days_off:
        penalty += weights.pref_off
    if pref.prefer_vessel and vessel_id and vessel_id != pref.prefer_vessel:
        penalty += weights.vessel_mismatch
    return penalty


def candidate_penalty(member: CrewMember, day: dt.date, vessel_id: str, is_night: bool,
                      state: RunState, weights: PenaltyWeights, rules: SchedulingRules,
                      per_crew: Dict[str, CrewPreference]) -> float:
    return (
        fairness_penalty(member.id, state, weights)
        + night_overage_penalty(member.id, is_night, state, weights, rules)
        + consecutive_night_penalty(member.id, day, is_night, state, weights)
        + preference_penalty(day, vessel_id, per_crew.get(member.id), weights)
    )


def score_candidates(candidates: Sequence[CrewMember], day: dt.date, vessel_id: str, is_night: bool,
                     state: RunState, weights: PenaltyWeights, rules: SchedulingRules,
                     per_crew: Dict[str, CrewPreference]) -> List[ScoredCandidate]:
    """Score and order candidates, cheapest first.

    `sorted` is stable, so equal penalties keep roster order.
    """
    scored = [
        ScoredCandidate(member, candidate_penalty(member, day, vessel_id, is_night, state, weights, rules, per_crew))
        for member in candidates
    ]
    return sorted(scored, key=lambda c: c.penalty)
