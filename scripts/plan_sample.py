import sys
import os
import logging

import yaml
import pandas as pd

# Ensure repository root on sys.path BEFORE importing local packages
repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from crew_scheduling.config import configure_logging, load_preferences, load_settings
from crew_scheduling.engine import plan
from crew_scheduling.models import Certification, CrewMember, DrydockWindow, LeaveRecord, PortCallWindow, ShiftTemplate
from crew_scheduling.output_formatter import crew_statistics, save_outputs, summarize
from crew_scheduling.utils import date_list, generate_days

DATA_DIR = os.path.join(repo_root, "data")
CONFIG_PATH = os.path.join(DATA_DIR, "sample_config.yml")

logger = logging.getLogger("plan_sample")


def _clean(row: dict) -> dict:
    """Drop NaN cells so model defaults apply; unwrap numpy scalars."""
    return {k: (v.item() if hasattr(v, "item") else v) for k, v in row.items() if not pd.isna(v)}


def load_crew(path: str):
    df = pd.read_csv(path, dtype={"id": str})
    return [CrewMember.model_validate(_clean(r)) for r in df.to_dict(orient="records")]


def load_shifts(path: str):
    df = pd.read_csv(path, dtype={"id": str, "start": str, "end": str})
    return [ShiftTemplate.model_validate(_clean(r)) for r in df.to_dict(orient="records")]


def main():
    engine = sys.argv[1] if len(sys.argv) > 1 else None

    settings = load_settings(CONFIG_PATH)
    configure_logging(settings)

    with open(CONFIG_PATH) as f:
        cfg = yaml.safe_load(f)

    if cfg.get("end_date"):
        days = date_list(str(cfg["start_date"]), str(cfg["end_date"]))
    else:
        days = generate_days(str(cfg["start_date"]), int(cfg.get("num_days", 7)))
    crew = load_crew(os.path.join(DATA_DIR, "sample_crew.csv"))
    shifts = load_shifts(os.path.join(DATA_DIR, "sample_shifts.csv"))
    leaves = [LeaveRecord.model_validate(r) for r in cfg.get("leaves", [])]
    port_calls = [PortCallWindow.model_validate(r) for r in cfg.get("port_calls", [])]
    drydocks = [DrydockWindow.model_validate(r) for r in cfg.get("drydocks", [])]
    certifications = {
        crew_id: [Certification.model_validate(c) for c in certs]
        for crew_id, certs in (cfg.get("certifications") or {}).items()
    }
    preferences = load_preferences(CONFIG_PATH)

    result = plan(
        engine or settings.default_engine,
        days, shifts, crew, leaves, port_calls, drydocks, certifications, preferences,
        timezone=settings.timezone,
    )

    summary = summarize(result, days, shifts)
    logger.info("Scheduled %d assignments, %d unfilled positions (%.1f%% coverage)",
                summary["scheduledAssignments"], summary["unfilledPositions"], summary["coverage"])
    for u in result.unfilled:
        logger.info("Unfilled %s %s x%d: %s", u.day, u.shift_id, u.need, u.reason)

    print(crew_statistics(result).to_string())

    paths = save_outputs(result, settings.output_dir, days, shifts)
    logger.info("Outputs saved to %s", os.path.dirname(paths["summary"]))


if __name__ == "__main__":
    main()
