"""Unit tests for data_models module - immutable pipeline data structures.

Real-world significance:
- Frozen dataclasses guarantee records are never modified after validation
- Wire field names in the summary must stay stable for downstream consumers
"""

from __future__ import annotations

import dataclasses
from datetime import datetime

import pytest

from patient_intake import data_models


@pytest.mark.unit
class TestCalendarDate:
    """Unit tests for CalendarDate dataclass."""

    def test_from_datetime_keeps_wall_clock(self) -> None:
        value = datetime(2024, 6, 17, 9, 30, 15)
        assert data_models.CalendarDate.from_datetime(value) == data_models.CalendarDate(
            2024, 6, 17, 9, 30, 15
        )

    def test_isoformat(self) -> None:
        assert data_models.CalendarDate(2000, 6, 15, 8, 5, 0).isoformat() == "2000-06-15T08:05:00"

    def test_is_frozen(self) -> None:
        value = data_models.CalendarDate(2000, 6, 15)
        with pytest.raises(dataclasses.FrozenInstanceError):
            value.month = 7  # type: ignore[misc]


@pytest.mark.unit
class TestIdentifier:
    """Unit tests for Identifier dataclass."""

    def test_is_marked(self) -> None:
        assert data_models.Identifier("*42").is_marked is True
        assert data_models.Identifier("42").is_marked is False

    def test_str(self) -> None:
        assert str(data_models.Identifier("*42")) == "*42"


@pytest.mark.unit
class TestBatchSummary:
    """Unit tests for BatchSummary dataclass."""

    def test_total_patients(self) -> None:
        summary = data_models.BatchSummary(
            patients=(
                data_models.PatientSummary(
                    age=30, is_over_21=1, is_complete=True, service_day_of_week="Friday"
                ),
            )
        )
        assert summary.total_patients == 1

    def test_default_is_empty(self) -> None:
        summary = data_models.BatchSummary()
        assert summary.to_dict() == {"patients": []}
        assert summary.rejected == []
