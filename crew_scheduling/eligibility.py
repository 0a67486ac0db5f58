"""
Hard constraints that decide whether a crew member may be scored for a shift.

Each check is a small predicate; `eligible_crew` combines them against the
live run state, so commitments made earlier in the run affect later shifts.
"""

import datetime as dt
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from crew_scheduling.models import Certification, CrewMember, LeaveRecord, ShiftTemplate, rank_index
from crew_scheduling.run_state import RunState
from crew_scheduling.utils import UTC, localize, parse_time_of_day

logger = logging.getLogger(__name__)

NIGHT_START_HOUR = 20
NIGHT_END_HOUR = 6

REASON_SKILL = "no crew with required skill: {}"
REASON_CERT = "no crew with required certification: {}"
REASON_RANK = "no crew with minimum rank: {}"
REASON_INSUFFICIENT = "insufficient eligible crew"


def is_night_shift(start: Union[dt.time, str]) -> bool:
    """Night shifts start at or after 20:00 or before 06:00."""
    if not isinstance(start, dt.time):
        start = parse_time_of_day(start, "start")
    return start.hour >= NIGHT_START_HOUR or start.hour < NIGHT_END_HOUR


def has_valid_certification(crew: CrewMember, required_cert: Optional[str], shift_date: dt.date,
                            certifications: Mapping[str, Sequence[Certification]]) -> bool:
    if not required_cert:
        return True
    # Profiles enriched by the fallback path already carry their certificates
    held = certifications.get(crew.id) or crew.certifications
    for cert in held:
        if cert.cert == required_cert and cert.expires_at >= shift_date:
            return True
    return False


def meets_rank(crew_rank: Optional[str], rank_min: Optional[str]) -> bool:
    """Rank ladder check. Unknown ranks on either side never exclude."""
    if not rank_min or not crew_rank:
        return True
    crew_idx = rank_index(crew_rank)
    min_idx = rank_index(rank_min)
    if crew_idx is None or min_idx is None:
        return True
    return crew_idx >= min_idx


def index_leaves(leaves: Iterable[LeaveRecord], tz: dt.tzinfo = UTC) -> Dict[str, List[tuple]]:
    """Leave windows per crew id, localized to the planning zone."""
    index = defaultdict(list)
    for leave in leaves:
        index[leave.crew_id].append((localize(leave.start, tz), localize(leave.end, tz)))
    return index


def is_on_leave(crew_id: str, shift_start: dt.datetime, leave_index: Mapping[str, List[tuple]]) -> bool:
    """On leave when the shift starts inside a leave window (inclusive)."""
    return any(start <= shift_start <= end for start, end in leave_index.get(crew_id, ()))


def eligible_crew(day: dt.date, shift: ShiftTemplate, shift_start: dt.datetime,
                  crew: Sequence[CrewMember], leave_index: Mapping[str, List[tuple]],
                  certifications: Mapping[str, Sequence[Certification]],
                  state: RunState, max_nights_per_week: int) -> List[CrewMember]:
    """Candidate pool for one shift on one day, in roster order."""
    night = is_night_shift(shift.start)
    pool = []
    for member in crew:
        # 1) Leave
        if is_on_leave(member.id, shift_start, leave_index):
            continue
        # 2) Skill
        if shift.skill_required and not member.has_skill(shift.skill_required):
            continue
        # 3) Rank
        if not meets_rank(member.rank, shift.rank_min):
            continue
        # 4) Certification valid on the shift date
        if not has_valid_certification(member, shift.cert_required, day, certifications):
            continue
        # 5) One shift per crew member per day
        if state.is_assigned_on(member.id, day):
            continue
        # 6) Night quota
        if night and state.nights_for(member.id) >= max_nights_per_week:
            continue
        pool.append(member)

    logger.debug("shift=%s day=%s eligible=%d/%d", shift.id, day, len(pool), len(crew))
    return pool


def unfilled_reason(shift: ShiftTemplate, pool_empty: bool) -> str:
    """Diagnostic for a shortfall.

    With an empty pool the minimum rank outranks the certification, which in
    turn outranks the skill requirement.
    """
    reason = REASON_INSUFFICIENT
    if pool_empty:
        if shift.skill_required:
            reason = REASON_SKILL.format(shift.skill_required)
        if shift.cert_required:
            reason = REASON_CERT.format(shift.cert_required)
        if shift.rank_min:
            reason = REASON_RANK.format(shift.rank_min)
    return reason
