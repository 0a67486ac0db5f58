"""
Tabular views and summary statistics of a planning result.
"""

import json
import os
from typing import Dict, Sequence

import pandas as pd

from crew_scheduling.eligibility import is_night_shift
from crew_scheduling.models import ScheduleResult, ShiftTemplate

ASSIGNMENT_COLUMNS = ["date", "shiftId", "crewId", "vesselId", "start", "end", "role"]
UNFILLED_COLUMNS = ["day", "shiftId", "need", "reason"]


def assignments_frame(result: ScheduleResult) -> pd.DataFrame:
    rows = [a.model_dump(mode="json", by_alias=True) for a in result.scheduled]
    return pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)


def unfilled_frame(result: ScheduleResult) -> pd.DataFrame:
    rows = [u.model_dump(mode="json", by_alias=True) for u in result.unfilled]
    return pd.DataFrame(rows, columns=UNFILLED_COLUMNS)


def roster_grid(result: ScheduleResult) -> pd.DataFrame:
    """Date x crew grid of shift ids; empty cells mean off duty."""
    df = assignments_frame(result)
    if df.empty:
        return pd.DataFrame()
    grid = df.pivot_table(index="date", columns="crewId", values="shiftId",
                          aggfunc=lambda s: "/".join(s))
    return grid.fillna("").sort_index()


def summarize(result: ScheduleResult, days: Sequence, shifts: Sequence[ShiftTemplate]) -> Dict:
    total_shifts = len(shifts) * len(days)
    scheduled = len(result.scheduled)
    unfilled_positions = sum(u.need for u in result.unfilled)
    coverage = (scheduled / total_shifts * 100) if total_shifts else 0.0
    return {
        "totalShifts": total_shifts,
        "scheduledAssignments": scheduled,
        "unfilledPositions": unfilled_positions,
        "coverage": coverage,
    }


def crew_statistics(result: ScheduleResult) -> pd.DataFrame:
    """Assignments and night shifts per crew member."""
    if not result.scheduled:
        return pd.DataFrame(columns=["assignments", "nights"])
    df = pd.DataFrame([
        {"crewId": a.crew_id, "shiftId": a.shift_id, "night": is_night_shift(a.start.time())}
        for a in result.scheduled
    ])
    stats = df.groupby("crewId").agg(assignments=("shiftId", "count"), nights=("night", "sum"))
    return stats.astype(int)


def save_outputs(result: ScheduleResult, out_dir: str, days: Sequence = (),
                 shifts: Sequence[ShiftTemplate] = ()) -> Dict[str, str]:
    """Write CSV and JSON outputs; returns the written paths by name."""
    os.makedirs(out_dir, exist_ok=True)
    paths = {
        "assignments": os.path.join(out_dir, "assignments.csv"),
        "unfilled": os.path.join(out_dir, "unfilled.csv"),
        "roster": os.path.join(out_dir, "roster.csv"),
        "summary": os.path.join(out_dir, "summary.json"),
    }

    assignments_frame(result).to_csv(paths["assignments"], index=False)
    unfilled_frame(result).to_csv(paths["unfilled"], index=False)
    roster_grid(result).to_csv(paths["roster"])

    with open(paths["summary"], "w") as f:
        json.dump(summarize(result, days, shifts), f, indent=2, default=str)

    return paths
