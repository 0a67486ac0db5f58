"""
Per-run accumulator for the constraint scheduler.

One instance is created for each planning call and threaded through the
day/shift loop; nothing here outlives the call.
"""

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from crew_scheduling.models import Assignment, CrewMember


@dataclass
class RunState:
    assignment_counts: Dict[str, int]
    night_counts: Dict[str, int]
    scheduled: List[Assignment] = field(default_factory=list)
    crew_on_day: Dict[dt.date, Set[str]] = field(default_factory=lambda: defaultdict(set))
    night_crew_on_day: Dict[dt.date, Set[str]] = field(default_factory=lambda: defaultdict(set))

    @classmethod
    def for_crew(cls, crew: Iterable[CrewMember]) -> "RunState":
        ids = [c.id for c in crew]
        return cls(
            assignment_counts={crew_id: 0 for crew_id in ids},
            night_counts={crew_id: 0 for crew_id in ids},
        )

    def assignments_for(self, crew_id: str) -> int:
        return self.assignment_counts.get(crew_id, 0)

    def nights_for(self, crew_id: str) -> int:
        return self.night_counts.get(crew_id, 0)

    def average_assignments(self) -> float:
        """Mean assignment count across the whole roster, not just candidates."""
        if not self.assignment_counts:
            return 0.0
        return sum(self.assignment_counts.values()) / len(self.assignment_counts)

    def is_assigned_on(self, crew_id: str, day: dt.date) -> bool:
        return crew_id in self.crew_on_day.get(day, ())

    def worked_night_on(self, crew_id: str, day: dt.date) -> bool:
        return crew_id in self.night_crew_on_day.get(day, ())

    def commit(self, assignment: Assignment, is_night: bool) -> None:
        crew_id = assignment.crew_id
        self.scheduled.append(assignment)
        self.assignment_counts[crew_id] = self.assignments_for(crew_id) + 1
        self.crew_on_day[assignment.date].add(crew_id)
        if is_night:
            self.night_counts[crew_id] = self.nights_for(crew_id) + 1
            self.night_crew_on_day[assignment.date].add(crew_id)
