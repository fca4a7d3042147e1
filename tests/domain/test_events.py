"""Tests for domain events, the event recorder, and clocks."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from workforce.domain.clock import FixedClock, SystemClock
from workforce.domain.equipment import Equipment
from workforce.domain.events import EventRecorder, EventSource
from workforce.domain.leave import LeaveApproved, LeaveRequest
from workforce.domain.team import Team


def _event(**overrides: object) -> LeaveApproved:
    fields: dict[str, object] = {
        "aggregate_id": "LEAVE-2025-0001",
        "occurred_at": datetime(2025, 3, 3, tzinfo=UTC),
        "employee_id": "EMP-2025-0001",
        "leave_type": "Vacation",
        "approver_id": "EMP-2025-0002",
        "days": Decimal(5),
    }
    fields.update(overrides)
    return LeaveApproved(**fields)  # type: ignore[arg-type]


class TestDomainEvent:
    def test_hook_name(self) -> None:
        assert _event().hook_name == "leave_approved"

    def test_payload_is_json_safe(self) -> None:
        payload = _event().to_payload()
        assert payload["event_type"] == "leave.approved"
        assert payload["occurred_at"].startswith("2025-03-03")
        assert payload["days"] == "5"

    def test_frozen(self) -> None:
        event = _event()
        with pytest.raises(ValidationError):
            event.days = Decimal(1)  # type: ignore[misc]

    def test_event_ids_unique(self) -> None:
        assert _event().event_id != _event().event_id


class TestEventRecorder:
    def test_release_drains(self) -> None:
        recorder = EventRecorder()
        first, second = _event(), _event()
        recorder.record(first)
        recorder.record(second)
        assert len(recorder) == 2
        assert recorder.peek() == (first, second)
        assert recorder.release() == [first, second]
        assert recorder.release() == []

    @pytest.mark.parametrize("cls", [Equipment, LeaveRequest, Team])
    def test_aggregates_are_event_sources(self, cls: type) -> None:
        assert issubclass(cls, EventSource)


class TestClocks:
    def test_fixed_clock_advances(self) -> None:
        clock = FixedClock.on(date(2025, 3, 3))
        assert clock.now() == datetime(2025, 3, 3, 9, tzinfo=UTC)
        clock.advance(days=1, hours=2)
        assert clock.today() == date(2025, 3, 4)

    def test_fixed_clock_never_goes_back(self) -> None:
        clock = FixedClock()
        with pytest.raises(ValueError, match="backwards"):
            clock.set_time(datetime(2024, 12, 31, tzinfo=UTC))

    def test_fixed_clock_requires_tz(self) -> None:
        with pytest.raises(ValueError):
            FixedClock(datetime(2025, 1, 1))

    def test_system_clock_is_utc(self) -> None:
        assert SystemClock().now().tzinfo is UTC
