"""Batch processing of raw patient records into a summary.

**Input Contract:**
- A sequence of raw records (decoded JSON objects) with ``dob``,
  ``patient-id`` and ``service-date`` fields

**Output Contract:**
- A :class:`BatchSummary` whose ``patients`` follow input order
- ``isOver21`` is an integer flag (1 when age >= 21)

**Error Handling:**
- Every record is validated first, then the batch is partitioned into
  successes and failures
- Failures are dropped from the output and logged as warnings here, at the
  batch boundary; no detail reaches the JSON summary
- One bad record never aborts the batch
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Tuple

import pandas as pd

from .data_models import BatchSummary, RawPatientRecord, RejectedRecord, RuntimeSettings
from .enums import InputField
from .errors import RecordValidationError
from .patient_record import PatientRecord

LOG = logging.getLogger(__name__)

COLUMN_MAP = {
    InputField.DATE_OF_BIRTH.value: "dob",
    InputField.PATIENT_ID.value: "patient_id",
    InputField.SERVICE_DATE.value: "service_date",
}


def records_to_frame(raw_records: Iterable[Any]) -> pd.DataFrame:
    """Frame raw records on the three input columns.

    Entries that are not JSON objects become empty rows so they are rejected
    by validation at their original position. Missing fields become None.
    Each column is built as an object Series, so an integer serial stays an
    ``int`` even when other rows leave that column empty.
    """
    rows = [item if isinstance(item, Mapping) else {} for item in raw_records]
    return pd.DataFrame(
        {
            column: pd.Series([row.get(column) for row in rows], dtype=object)
            for column in InputField.all_values()
        }
    )


def iter_raw_records(frame: pd.DataFrame) -> List[RawPatientRecord]:
    renamed = frame.rename(columns=COLUMN_MAP)
    return [RawPatientRecord(**row) for row in renamed.to_dict("records")]


def partition_records(
    raw_records: Iterable[RawPatientRecord],
    settings: RuntimeSettings,
    now: Optional[datetime | date] = None,
) -> Tuple[List[PatientRecord], List[RejectedRecord]]:
    """Validate every record and split the results.

    Returns
    -------
    Tuple[List[PatientRecord], List[RejectedRecord]]
        Built records and rejected records, each in input order.
    """
    successes: List[PatientRecord] = []
    failures: List[RejectedRecord] = []

    for index, raw in enumerate(raw_records):
        try:
            record = PatientRecord.construct(
                raw.dob, raw.patient_id, raw.service_date, settings, now=now
            )
        except RecordValidationError as exc:
            reason = str(exc.__cause__ or exc)
            failures.append(RejectedRecord(index=index, reason=reason))
            continue
        successes.append(record)

    return successes, failures


def process(
    raw_records: Iterable[Any],
    settings: RuntimeSettings,
    now: Optional[datetime | date] = None,
) -> BatchSummary:
    """Build the patient summary for a batch of raw records.

    Parameters
    ----------
    raw_records : Iterable[Any]
        Decoded JSON objects with ``dob``, ``patient-id`` and ``service-date``.
    settings : RuntimeSettings
        Process-wide timezone and locale.
    now : datetime | date, optional
        Fixed current moment for age derivation; defaults to the current time
        in the configured timezone.

    Returns
    -------
    BatchSummary
        Summaries of the valid records in input order.
    """
    frame = records_to_frame(raw_records)
    records, rejected = partition_records(iter_raw_records(frame), settings, now)

    for item in rejected:
        LOG.warning("Skipping record %d: %s", item.index, item.reason)
    LOG.info(
        "Processed %d records: %d summarized, %d skipped",
        len(frame),
        len(records),
        len(rejected),
    )

    return BatchSummary(
        patients=tuple(record.to_summary() for record in records),
        rejected=rejected,
    )
