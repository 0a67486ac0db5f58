import logging
import os
from typing import Optional

import yaml
from pydantic import BaseModel

from crew_scheduling.models import SchedulingPreferences

ENV_TIMEZONE = "CREW_SCHEDULER_TZ"
ENV_LOG_LEVEL = "CREW_SCHEDULER_LOG_LEVEL"
ENV_OUT_DIR = "CREW_SCHEDULER_OUT_DIR"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class EngineSettings(BaseModel):
    timezone: str = "UTC"          # planning zone for day + time-of-day arithmetic
    default_engine: str = "greedy"
    log_level: str = "INFO"
    output_dir: str = "out"


def _read_yaml(path: str) -> dict:
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def load_settings(path: Optional[str] = None) -> EngineSettings:
    """Settings from an optional YAML file, then environment overrides."""
    raw = {}
    if path:
        raw = dict(_read_yaml(path).get("engine") or {})
    if os.getenv(ENV_TIMEZONE):
        raw["timezone"] = os.environ[ENV_TIMEZONE]
    if os.getenv(ENV_LOG_LEVEL):
        raw["log_level"] = os.environ[ENV_LOG_LEVEL]
    if os.getenv(ENV_OUT_DIR):
        raw["output_dir"] = os.environ[ENV_OUT_DIR]
    return EngineSettings.model_validate(raw)


def load_preferences(path: str) -> SchedulingPreferences:
    """Penalty weights, rules and per-crew overrides from the `preferences` block."""
    raw = _read_yaml(path)
    return SchedulingPreferences.model_validate(raw.get("preferences") or {})


def configure_logging(settings: EngineSettings) -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
