"""
Error taxonomy for the scheduling engine.

Input problems are raised while models are being built so that bad data never
reaches eligibility or scoring. These deliberately do not subclass ValueError:
pydantic would otherwise fold them into a generic ValidationError.
"""


class SchedulingError(Exception):
    """Base class for every error raised by the engine."""


class InvalidShiftTemplate(SchedulingError):
    """A shift template is missing a required field or carries an impossible value."""

    def __init__(self, message: str, shift_id: str = None):
        super().__init__(message)
        self.shift_id = shift_id


class InvalidTimeFormat(SchedulingError):
    """A time-of-day string is not HH:MM or HH:MM:SS."""

    def __init__(self, value, field: str = "time"):
        super().__init__(f"Invalid {field} {value!r}: expected HH:MM or HH:MM:SS")
        self.value = value
        self.field = field


class InvalidRequest(SchedulingError):
    """A planning request payload is malformed."""
