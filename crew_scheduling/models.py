from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional
import datetime as dt
from enum import Enum

from crew_scheduling.exceptions import InvalidRequest, InvalidShiftTemplate
from crew_scheduling.utils import parse_time_of_day, resolve_zone


class Engine(str, Enum):
    CONSTRAINT = "constraint"    # heuristic penalty scorer
    GREEDY = "greedy"            # simple greedy planner

    @classmethod
    def from_tag(cls, tag) -> "Engine":
        """Only the exact tag 'constraint' selects the heuristic; anything else is greedy."""
        if isinstance(tag, Engine):
            return tag
        if tag == cls.CONSTRAINT.value:
            return cls.CONSTRAINT
        return cls.GREEDY


class Rank(str, Enum):
    ABLE_SEAMAN = "Able Seaman"
    DECK_OFFICER = "Deck Officer"
    CHIEF_OFFICER = "Chief Officer"
    CHIEF_ENGINEER = "Chief Engineer"


# Lowest to highest
RANK_ORDER: Dict[str, int] = {rank.value: i for i, rank in enumerate(Rank)}


def rank_index(rank: Optional[str]) -> Optional[int]:
    """Position in the rank ladder, or None for unknown ranks."""
    if not rank:
        return None
    return RANK_ORDER.get(rank)


class WireModel(BaseModel):
    """Accepts camelCase keys from upstream payloads as well as field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShiftTemplate(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    vessel_id: str = ""
    start: dt.time
    end: dt.time
    needed: int = 1
    skill_required: Optional[str] = None
    rank_min: Optional[str] = None
    cert_required: Optional[str] = None
    role: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _check_required_fields(cls, data):
        if not isinstance(data, dict):
            raise InvalidShiftTemplate(f"Shift template must be a mapping, got {type(data).__name__}")
        data = dict(data)

        shift_id = data.get("id")
        if shift_id is None or not str(shift_id).strip():
            raise InvalidShiftTemplate("Shift template is missing an id")
        shift_id = str(shift_id)
        data["id"] = shift_id

        for key in ("start", "end"):
            if data.get(key) in (None, ""):
                raise InvalidShiftTemplate(f"Shift template {shift_id} is missing '{key}'", shift_id)

        # Zero or null means a single crew member
        needed = data.get("needed")
        if not needed:
            data["needed"] = 1
        else:
            try:
                needed = int(needed)
            except (TypeError, ValueError):
                raise InvalidShiftTemplate(f"Shift template {shift_id} has non-numeric needed={needed!r}", shift_id)
            if needed < 1:
                raise InvalidShiftTemplate(f"Shift template {shift_id} needs at least one crew member", shift_id)
            data["needed"] = needed

        # Upstream records use null for "no vessel"
        for key in ("vesselId", "vessel_id"):
            if key in data and data[key] is None:
                data[key] = ""
        return data

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_times(cls, value, info):
        return parse_time_of_day(value, info.field_name)


class Certification(WireModel):
    cert: str
    expires_at: dt.date

    @field_validator("expires_at", mode="before")
    @classmethod
    def _to_date(cls, value):
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, str):
            return dt.date.fromisoformat(value[:10])
        return value


class CrewMember(WireModel):
    id: str
    name: str = ""
    rank: Optional[str] = None
    skills: List[str] = []
    certifications: List[Certification] = []

    # Used by the greedy planner
    vessel_id: Optional[str] = None
    active: bool = True
    min_rest_h: float = 10.0
    max_hours_7d: float = Field(72.0, alias="maxHours7d")

    @field_validator("skills", mode="before")
    @classmethod
    def _skills_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return list(value)

    @field_validator("active", mode="before")
    @classmethod
    def _default_active(cls, value):
        return True if value is None else value

    @field_validator("min_rest_h", mode="before")
    @classmethod
    def _default_rest(cls, value):
        return value or 10.0

    @field_validator("max_hours_7d", mode="before")
    @classmethod
    def _default_hours(cls, value):
        return value or 72.0

    def has_skill(self, skill: str) -> bool:
        return skill in self.skills


class LeaveRecord(WireModel):
    crew_id: str
    start: dt.datetime
    end: dt.datetime
    reason: Optional[str] = None


class VesselWindow(WireModel):
    vessel_id: str
    start: dt.datetime
    end: dt.datetime


class PortCallWindow(VesselWindow):
    """Vessel in port: scheduling is allowed during overlap."""


class DrydockWindow(VesselWindow):
    """Vessel out of service: scheduling is blocked during overlap."""


class PenaltyWeights(BaseModel):
    unfilled: float = 1000
    fairness: float = 20
    night_over: float = 10
    consec_night: float = 8
    pref_off: float = 6
    vessel_mismatch: float = 3


class SchedulingRules(BaseModel):
    max_nights_per_week: int = 4


class CrewPreference(BaseModel):
    crew_id: str
    days_off: List[dt.date] = []
    prefer_vessel: Optional[str] = None

    # Hours-of-Rest context supplied by upstream callers; carried, not consumed
    rest_7d: Optional[float] = None
    min_rest_24: Optional[float] = None
    nights_this_week: Optional[int] = None

    @field_validator("days_off", mode="before")
    @classmethod
    def _days(cls, value):
        if value is None:
            return []
        return [dt.date.fromisoformat(str(d)[:10]) if not isinstance(d, dt.date) else d for d in value]


class SchedulingPreferences(BaseModel):
    weights: PenaltyWeights = PenaltyWeights()
    rules: SchedulingRules = SchedulingRules()
    per_crew: List[CrewPreference] = []

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def crew_index(self) -> Dict[str, CrewPreference]:
        return {pref.crew_id: pref for pref in self.per_crew if pref.crew_id}


class Assignment(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: dt.date
    shift_id: str
    crew_id: str
    vessel_id: Optional[str] = None
    start: dt.datetime
    end: dt.datetime
    role: Optional[str] = None


class UnfilledShift(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    day: dt.date
    shift_id: str
    need: int
    reason: str


class ScheduleResult(WireModel):
    scheduled: List[Assignment] = []
    unfilled: List[UnfilledShift] = []


class ScheduleRequest(WireModel):
    engine: str = Engine.GREEDY.value
    days: List[dt.date]
    shifts: List[ShiftTemplate]
    crew: List[CrewMember]
    leaves: List[LeaveRecord] = []
    port_calls: List[PortCallWindow] = []
    drydocks: List[DrydockWindow] = []
    certifications: Dict[str, List[Certification]] = {}
    preferences: Optional[SchedulingPreferences] = None
    timezone: str = "UTC"

    @field_validator("leaves", "port_calls", "drydocks", mode="before")
    @classmethod
    def _empty_lists(cls, value):
        return [] if value is None else value

    @field_validator("certifications", mode="before")
    @classmethod
    def _empty_certs(cls, value):
        return {} if value is None else value

    @field_validator("timezone", mode="before")
    @classmethod
    def _known_zone(cls, value):
        if value is None:
            return "UTC"
        try:
            resolve_zone(value)
        except (KeyError, ValueError) as exc:
            raise InvalidRequest(f"Unknown planning time zone {value!r}") from exc
        return value
