"""Validated, normalized patient record.

A :class:`PatientRecord` is built once per input row by
:meth:`PatientRecord.construct`. Construction is all-or-nothing: if the date
of birth, service date or identifier fails validation a
``RecordValidationError`` is raised and no record exists. Derived fields (age,
account completion, service weekday) are computed once at construction and
the record is immutable afterwards.

Age intentionally uses the Julian-day approximation
``int((JD(today) - JD(dob)) / 365)`` rather than a calendar-aware year
difference, so it can lag the true age by a few days around birthdays.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from babel.dates import format_datetime

from . import date_normalizer, identifier_validator
from .data_models import CalendarDate, Identifier, PatientSummary, RuntimeSettings
from .errors import PatientIntakeError, RecordValidationError

DAYS_PER_YEAR = 365
ADULT_AGE = 21


def gregorian_to_jd(month: int, day: int, year: int) -> int:
    """Convert a proleptic Gregorian date to a Julian day number.

    >>> gregorian_to_jd(1, 1, 2000)
    2451545
    """
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    return (
        day
        + (153 * m + 2) // 5
        + 365 * y
        + y // 4
        - y // 100
        + y // 400
        - 32045
    )


def compute_age(date_of_birth: CalendarDate, today: date) -> int:
    """Whole years between two dates using the Julian-day approximation.

    Time of day is ignored. The division truncates toward zero, so a date of
    birth in the future yields 0 until it is a full 365 days ahead.
    """
    dob_jd = gregorian_to_jd(
        date_of_birth.month, date_of_birth.day, date_of_birth.year
    )
    today_jd = gregorian_to_jd(today.month, today.day, today.year)
    return int((today_jd - dob_jd) / DAYS_PER_YEAR)


def service_weekday(
    service_date: CalendarDate, zone: ZoneInfo, locale: str = "en"
) -> str:
    """Weekday name of the service date as a local time in ``zone``."""
    local = datetime(
        service_date.year,
        service_date.month,
        service_date.day,
        service_date.hour,
        service_date.minute,
        service_date.second,
        tzinfo=zone,
    )
    return format_datetime(local, "EEEE", tzinfo=zone, locale=locale)


def _current_date(zone: ZoneInfo, now: Optional[datetime | date]) -> date:
    if now is None:
        return datetime.now(zone).date()
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(zone)
        return now.date()
    return now


@dataclass(frozen=True)
class PatientRecord:
    """One patient after validation, with derived fields.

    Fields
    ------
    date_of_birth : CalendarDate
        Normalized date of birth.
    service_date : CalendarDate
        Normalized service date.
    patient_id : Identifier
        Validated identifier (marker preserved).
    age : int
        Whole years at construction time, Julian-day approximation.
    is_account_complete : bool
        False when ``patient_id`` starts with ``*``.
    service_day_of_week : str
        Weekday name of ``service_date`` in the configured timezone.
    """

    date_of_birth: CalendarDate
    service_date: CalendarDate
    patient_id: Identifier
    age: int
    is_account_complete: bool
    service_day_of_week: str

    @classmethod
    def construct(
        cls,
        dob: Any,
        patient_id: Any,
        service_date: Any,
        settings: RuntimeSettings,
        now: Optional[datetime | date] = None,
    ) -> "PatientRecord":
        """Validate raw inputs and build a record.

        Parameters
        ----------
        dob : str | int | float
            Date of birth as a date string or spreadsheet serial.
        patient_id : str
            Raw identifier.
        service_date : str | int | float
            Service date as a date string or spreadsheet serial.
        settings : RuntimeSettings
            Timezone and locale used for "now" and the service weekday.
        now : datetime | date, optional
            Fixed current moment. Defaults to the current time in
            ``settings.timezone``.

        Raises
        ------
        RecordValidationError
            If any input fails validation. The underlying error is chained
            but callers must not depend on which field failed.
        """
        zone = ZoneInfo(settings.timezone)
        today = _current_date(zone, now)
        try:
            date_of_birth = date_normalizer.normalize(dob, today)
            normalized_service_date = date_normalizer.normalize(service_date, today)
            identifier = identifier_validator.validate(patient_id)
        except PatientIntakeError as exc:
            raise RecordValidationError("Failed to parse required data") from exc

        return cls(
            date_of_birth=date_of_birth,
            service_date=normalized_service_date,
            patient_id=identifier,
            age=compute_age(date_of_birth, today),
            is_account_complete=identifier_validator.is_complete(identifier),
            service_day_of_week=service_weekday(
                normalized_service_date, zone, settings.locale
            ),
        )

    @property
    def is_over_21(self) -> int:
        return 1 if self.age >= ADULT_AGE else 0

    def to_summary(self) -> PatientSummary:
        return PatientSummary(
            age=self.age,
            is_over_21=self.is_over_21,
            is_complete=self.is_account_complete,
            service_day_of_week=self.service_day_of_week,
        )
