"""
Greedy crew planner.

Walks each day and shift in order and takes the first crew members that pass
skill, home-vessel, leave, minimum-rest and rolling 7-day hour checks. Crew
whose home vessel matches the shift are tried first.
"""

import datetime as dt
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from crew_scheduling.models import Assignment, CrewMember, LeaveRecord, ScheduleResult, ShiftTemplate, UnfilledShift
from crew_scheduling.utils import UTC, hours_between, localize, overlaps, shift_window

logger = logging.getLogger(__name__)

REASON_GREEDY_SHORTFALL = "insufficient crew for constraints"
ROLLING_WINDOW = dt.timedelta(days=7)


def hours_in_range(assignments: Sequence[Assignment], crew_id: str,
                   window_start: dt.datetime, window_end: dt.datetime) -> float:
    """Hours a crew member works inside [window_start, window_end)."""
    total = 0.0
    for a in assignments:
        if a.crew_id != crew_id:
            continue
        lo = max(a.start, window_start)
        hi = min(a.end, window_end)
        if lo < hi:
            total += hours_between(lo, hi)
    return total


def rest_ok(assignments: Sequence[Assignment], crew_id: str, start: dt.datetime, min_rest_h: float) -> bool:
    last_end: Optional[dt.datetime] = None
    for a in assignments:
        if a.crew_id != crew_id:
            continue
        if a.end <= start and (last_end is None or a.end > last_end):
            last_end = a.end
    if last_end is None:
        return True
    return hours_between(last_end, start) >= min_rest_h


def _crew_order(crew: Sequence[CrewMember], vessel_id: str) -> List[CrewMember]:
    def key(member: CrewMember):
        vessel_match = 0 if not vessel_id or member.vessel_id == vessel_id else 1
        return vessel_match, (member.rank or "").casefold()
    return sorted(crew, key=key)


def plan_shifts(days: Sequence[dt.date],
                shifts: Sequence[ShiftTemplate],
                crew: Sequence[CrewMember],
                leaves: Sequence[LeaveRecord],
                existing: Sequence[Assignment] = (),
                tz: dt.tzinfo = UTC) -> ScheduleResult:
    """Greedy fill. `scheduled` includes the `existing` assignments passed in."""
    assignments: List[Assignment] = list(existing)
    unfilled: List[UnfilledShift] = []

    leave_index: Dict[str, List[tuple]] = defaultdict(list)
    for leave in leaves:
        leave_index[leave.crew_id].append((localize(leave.start, tz), localize(leave.end, tz)))

    logger.info("Greedy planning %d shift templates over %d days for %d crew",
                len(shifts), len(days), len(crew))

    for day in days:
        for shift in shifts:
            start, end = shift_window(day, shift.start, shift.end, tz)
            shift_hours = hours_between(start, end)
            vessel_id = shift.vessel_id
            picked = 0

            for member in _crew_order(crew, vessel_id):
                if picked >= shift.needed:
                    break
                if not member.active:
                    continue
                if any(a.crew_id == member.id and a.date == day for a in assignments):
                    continue
                if shift.skill_required and not member.has_skill(shift.skill_required):
                    continue
                if vessel_id and member.vessel_id and member.vessel_id != vessel_id:
                    continue
                if any(overlaps(lv_start, lv_end, start, end) for lv_start, lv_end in leave_index.get(member.id, ())):
                    continue
                if not rest_ok(assignments, member.id, start, member.min_rest_h):
                    continue
                week_start = start - ROLLING_WINDOW
                week_end = start + dt.timedelta(microseconds=1)
                if hours_in_range(assignments, member.id, week_start, week_end) + shift_hours > member.max_hours_7d:
                    continue

                assignments.append(Assignment(
                    date=day,
                    shift_id=shift.id,
                    crew_id=member.id,
                    vessel_id=vessel_id or None,
                    start=start,
                    end=end,
                    role=shift.role,
                ))
                picked += 1

            if picked < shift.needed:
                unfilled.append(UnfilledShift(day=day, shift_id=shift.id, need=shift.needed - picked,
                                              reason=REASON_GREEDY_SHORTFALL))

    logger.info("Greedy planning finished: %d assignments, %d unfilled entries", len(assignments), len(unfilled))
    return ScheduleResult(scheduled=assignments, unfilled=unfilled)
