"""
Constraint scheduler: hard eligibility gates followed by a penalty-ranked pick.

Days and shift templates are processed strictly in the order given. Each shift
sees the assignments committed before it, so the loop cannot be parallelised
per shift.
"""

import datetime as dt
import logging
from typing import Dict, List, Optional, Sequence

from crew_scheduling.eligibility import eligible_crew, index_leaves, is_night_shift, unfilled_reason
from crew_scheduling.models import (
    Assignment,
    Certification,
    CrewMember,
    DrydockWindow,
    LeaveRecord,
    PortCallWindow,
    ScheduleResult,
    SchedulingPreferences,
    ShiftTemplate,
    UnfilledShift,
)
from crew_scheduling.run_state import RunState
from crew_scheduling.scoring import score_candidates
from crew_scheduling.utils import UTC, shift_window
from crew_scheduling.vessel_windows import is_window_allowed

logger = logging.getLogger(__name__)

REASON_VESSEL_UNAVAILABLE = "vessel unavailable (drydock)"


def schedule_with_constraints(days: Sequence[dt.date],
                              shifts: Sequence[ShiftTemplate],
                              crew: Sequence[CrewMember],
                              leaves: Sequence[LeaveRecord],
                              port_calls: Sequence[PortCallWindow],
                              drydocks: Sequence[DrydockWindow],
                              certifications: Dict[str, List[Certification]],
                              preferences: Optional[SchedulingPreferences] = None,
                              tz: dt.tzinfo = UTC) -> ScheduleResult:
    """Fill every (day, shift) slot with the lowest-penalty eligible crew."""
    preferences = preferences or SchedulingPreferences()
    weights = preferences.weights
    rules = preferences.rules
    per_crew = preferences.crew_index()

    state = RunState.for_crew(crew)
    leave_index = index_leaves(leaves, tz)
    unfilled: List[UnfilledShift] = []

    logger.info("Constraint scheduling %d shift templates over %d days for %d crew",
                len(shifts), len(days), len(crew))

    for day in days:
        for shift in shifts:
            vessel_id = shift.vessel_id
            needed = shift.needed

            if not is_window_allowed(day, shift.start, shift.end, vessel_id, port_calls, drydocks, tz):
                unfilled.append(UnfilledShift(day=day, shift_id=shift.id, need=needed,
                                              reason=REASON_VESSEL_UNAVAILABLE))
                logger.debug("shift=%s day=%s blocked by dry dock on vessel %s", shift.id, day, vessel_id)
                continue

            shift_start, shift_end = shift_window(day, shift.start, shift.end, tz)
            night = is_night_shift(shift.start)

            pool = eligible_crew(day, shift, shift_start, crew, leave_index, certifications,
                                 state, rules.max_nights_per_week)
            ranked = score_candidates(pool, day, vessel_id, night, state, weights, rules, per_crew)

            committed = min(needed, len(ranked))
            for candidate in ranked[:committed]:
                state.commit(
                    Assignment(
                        date=day,
                        shift_id=shift.id,
                        crew_id=candidate.crew.id,
                        vessel_id=vessel_id or None,
                        start=shift_start,
                        end=shift_end,
                        role=shift.role,
                    ),
                    is_night=night,
                )

            shortfall = needed - committed
            if shortfall > 0:
                unfilled.append(UnfilledShift(day=day, shift_id=shift.id, need=shortfall,
                                              reason=unfilled_reason(shift, not pool)))

    logger.info("Constraint scheduling finished: %d assignments, %d unfilled entries",
                len(state.scheduled), len(unfilled))
    return ScheduleResult(scheduled=list(state.scheduled), unfilled=unfilled)
