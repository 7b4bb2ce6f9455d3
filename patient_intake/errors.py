"""Error taxonomy for patient record validation.

All record-level errors derive from ``ValueError`` so that callers treating
bad input generically (``except ValueError``) keep working. They are raised
while building a single :class:`~patient_intake.patient_record.PatientRecord`
and are caught only at the batch boundary, where the record is skipped.
"""

from __future__ import annotations


class PatientIntakeError(ValueError):
    """Base class for record-level validation failures."""


class DateParseError(PatientIntakeError):
    """Neither the calendar-string parse nor the serial-date parse resolved a month."""


class IdentifierFormatError(PatientIntakeError):
    """Patient identifier is not an optional ``*`` followed by ASCII digits."""


class RecordValidationError(PatientIntakeError):
    """A patient record could not be constructed from its raw inputs.

    Wraps the underlying :class:`DateParseError` or
    :class:`IdentifierFormatError` via exception chaining. Callers must not
    branch on which field failed.
    """
