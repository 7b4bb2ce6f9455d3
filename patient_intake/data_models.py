"""Unified data models for the patient intake pipeline.

This module provides the immutable dataclasses passed between processing
steps, ensuring consistency and type safety from raw record to JSON summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

MARKER = "*"


@dataclass(frozen=True)
class CalendarDate:
    """Resolved calendar date and wall-clock time.

    Produced only by :func:`patient_intake.date_normalizer.normalize`. A
    CalendarDate always carries a resolved month; an unresolved parse raises
    ``DateParseError`` instead of producing one.

    Fields
    ------
    year : int
        Four-digit year.
    month : int
        Month of year (1-12).
    day : int
        Day of month (1-31).
    hour : int
        Hour of day (0-23).
    minute : int
        Minute (0-59).
    second : int
        Second (0-59).
    """

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    @classmethod
    def from_datetime(cls, value: datetime) -> "CalendarDate":
        """Build a CalendarDate from the wall-clock fields of a datetime."""
        return cls(
            year=value.year,
            month=value.month,
            day=value.day,
            hour=value.hour,
            minute=value.minute,
            second=value.second,
        )

    def to_datetime(self) -> datetime:
        """Return the naive wall-clock datetime for this date."""
        return datetime(
            self.year, self.month, self.day, self.hour, self.minute, self.second
        )

    def isoformat(self) -> str:
        """Canonical rendering, e.g. ``2000-06-15T08:30:00``."""
        return self.to_datetime().isoformat()


@dataclass(frozen=True)
class Identifier:
    """Validated patient identifier.

    ``value`` always matches an optional leading ``*`` marker followed by one
    or more ASCII digits. The marker is data: it flags an incomplete account.
    """

    value: str

    @property
    def is_marked(self) -> bool:
        return self.value[0] == MARKER

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RuntimeSettings:
    """Process-wide settings read once from configuration.

    Parameters
    ----------
    timezone : str
        IANA timezone name used for "now" and for weekday derivation.
    locale : str
        Locale used to render weekday names (default English).
    """

    timezone: str
    locale: str = "en"


@dataclass(frozen=True)
class PatientSummary:
    """Per-patient output object.

    Parameters
    ----------
    age : int
        Age in whole years from the Julian-day approximation.
    is_over_21 : int
        1 when ``age >= 21`` else 0. Integer flag, not a boolean.
    is_complete : bool
        False when the patient identifier carries the ``*`` marker.
    service_day_of_week : str
        Weekday name of the service date, e.g. ``"Monday"``.
    """

    age: int
    is_over_21: int
    is_complete: bool
    service_day_of_week: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the wire field names used in the output envelope."""
        return {
            "age": self.age,
            "isOver21": self.is_over_21,
            "isComplete": self.is_complete,
            "serviceDayOfWeek": self.service_day_of_week,
        }


@dataclass(frozen=True)
class RejectedRecord:
    """Raw record that failed validation and was dropped from the batch.

    Kept for logging at the batch boundary only; never serialized.
    """

    index: int
    reason: str


@dataclass(frozen=True)
class BatchSummary:
    """Result of processing one batch of raw records.

    Parameters
    ----------
    patients : Tuple[PatientSummary, ...]
        Summaries of successfully built records, in input order.
    rejected : List[RejectedRecord]
        Records skipped during validation. Not part of the output envelope.
    """

    patients: Tuple[PatientSummary, ...] = ()
    rejected: List[RejectedRecord] = field(default_factory=list)

    @property
    def total_patients(self) -> int:
        return len(self.patients)

    def to_dict(self) -> Dict[str, Any]:
        return {"patients": [patient.to_dict() for patient in self.patients]}


@dataclass(frozen=True)
class RawPatientRecord:
    """One input row as received from the source.

    Values are kept exactly as decoded from JSON: dates may be strings or
    numbers, the identifier should be a string. Missing keys are ``None``.
    """

    dob: Optional[Any]
    patient_id: Optional[Any]
    service_date: Optional[Any]
