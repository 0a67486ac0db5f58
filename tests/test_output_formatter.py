import datetime as dt
import json

import pandas as pd

from crew_scheduling.engine import plan
from crew_scheduling.models import CrewMember, ShiftTemplate
from crew_scheduling.output_formatter import (
    assignments_frame,
    crew_statistics,
    roster_grid,
    save_outputs,
    summarize,
)
from crew_scheduling.utils import generate_days

DAYS = generate_days("2025-01-01", 2)
SHIFTS = [
    ShiftTemplate(id="day", vessel_id="V1", start="08:00", end="16:00", needed=2),
    ShiftTemplate(id="night", vessel_id="V1", start="22:00", end="06:00"),
]
CREW = [CrewMember(id="a"), CrewMember(id="b")]


def _result():
    return plan("constraint", DAYS, SHIFTS, CREW)


def test_summary_counts_positions():
    result = _result()
    summary = summarize(result, DAYS, SHIFTS)
    assert summary["totalShifts"] == 4
    assert summary["scheduledAssignments"] == 4
    assert summary["unfilledPositions"] == 2
    assert summary["coverage"] == 100.0


def test_frames_use_wire_column_names():
    df = assignments_frame(_result())
    assert list(df.columns) == ["date", "shiftId", "crewId", "vesselId", "start", "end", "role"]
    assert len(df) == 4


def test_roster_grid_and_stats():
    result = _result()
    grid = roster_grid(result)
    assert list(grid.columns) == ["a", "b"]
    assert grid.loc["2025-01-01", "a"] == "day"

    stats = crew_statistics(result)
    assert int(stats["assignments"].sum()) == 4
    assert int(stats["nights"].sum()) == 0


def test_empty_result_frames():
    result = plan("constraint", DAYS, SHIFTS, [])
    assert roster_grid(result).empty
    assert crew_statistics(result).empty
    assert summarize(result, DAYS, SHIFTS)["unfilledPositions"] == 6


def test_save_outputs(tmp_path):
    result = _result()
    paths = save_outputs(result, str(tmp_path / "out"), DAYS, SHIFTS)

    unfilled = pd.read_csv(paths["unfilled"])
    assert list(unfilled["shiftId"]) == ["night", "night"]
    with open(paths["summary"]) as f:
        assert json.load(f)["totalShifts"] == 4
