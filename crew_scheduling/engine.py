"""
Engine selection.

`plan_with_engine` is the single entry point. The constraint strategy reports
failure through a `StrategyAttempt` instead of raising; the selector checks the
attempt and re-runs the same request through the greedy fallback. Failures in
the fallback propagate to the caller.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from crew_scheduling.constraint_scheduler import schedule_with_constraints
from crew_scheduling.greedy import plan_shifts
from crew_scheduling.models import (
    Certification,
    CrewMember,
    DrydockWindow,
    Engine,
    LeaveRecord,
    PortCallWindow,
    ScheduleRequest,
    ScheduleResult,
    SchedulingPreferences,
    ShiftTemplate,
)
from crew_scheduling.utils import resolve_zone
from crew_scheduling.vessel_windows import has_allowed_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyAttempt:
    result: Optional[ScheduleResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


def attempt_constraint_schedule(request: ScheduleRequest) -> StrategyAttempt:
    """Run the constraint scheduler, capturing any failure in the attempt."""
    tz = resolve_zone(request.timezone)
    try:
        result = schedule_with_constraints(
            request.days, request.shifts, request.crew, request.leaves,
            request.port_calls, request.drydocks, request.certifications,
            request.preferences, tz,
        )
    except Exception as exc:
        return StrategyAttempt(error=exc)
    return StrategyAttempt(result=result)


def enrich_crew(crew: Sequence[CrewMember], certifications: Dict[str, List[Certification]]) -> List[CrewMember]:
    """Copy each crew profile with its certification list merged in."""
    return [
        member.model_copy(update={"certifications": list(certifications.get(member.id, []))})
        for member in crew
    ]


def schedule_with_greedy(request: ScheduleRequest) -> ScheduleResult:
    tz = resolve_zone(request.timezone)
    available_shifts = [
        shift for shift in request.shifts
        if has_allowed_window(request.days, shift.start, shift.end, shift.vessel_id,
                              request.port_calls, request.drydocks, tz)
    ]
    dropped = len(request.shifts) - len(available_shifts)
    if dropped:
        logger.info("Greedy fallback dropped %d shift templates with no allowed vessel window", dropped)
    enriched = enrich_crew(request.crew, request.certifications)
    return plan_shifts(request.days, available_shifts, enriched, request.leaves, [], tz=tz)


def plan_with_engine(request: ScheduleRequest) -> ScheduleResult:
    engine = Engine.from_tag(request.engine)
    logger.info("Planning with engine=%s (requested %r)", engine.value, request.engine)

    if engine is Engine.CONSTRAINT:
        attempt = attempt_constraint_schedule(request)
        if attempt.ok:
            return attempt.result
        logger.warning("Constraint scheduling failed, falling back to greedy scheduler: %s", attempt.error)

    return schedule_with_greedy(request)


def plan(engine,
         days: Sequence[dt.date],
         shifts: Sequence[ShiftTemplate],
         crew: Sequence[CrewMember],
         leaves: Sequence[LeaveRecord] = (),
         port_calls: Sequence[PortCallWindow] = (),
         drydocks: Sequence[DrydockWindow] = (),
         certifications: Optional[Dict[str, List[Certification]]] = None,
         preferences: Optional[SchedulingPreferences] = None,
         timezone: str = "UTC") -> ScheduleResult:
    """Keyword-friendly wrapper around `plan_with_engine`."""
    request = ScheduleRequest(
        engine=engine.value if isinstance(engine, Engine) else str(engine),
        days=list(days),
        shifts=list(shifts),
        crew=list(crew),
        leaves=list(leaves),
        port_calls=list(port_calls),
        drydocks=list(drydocks),
        certifications=certifications or {},
        preferences=preferences,
        timezone=timezone,
    )
    return plan_with_engine(request)
