"""Domain events and the event-recording capability shared by aggregates.

Aggregates do not inherit event behaviour. Each one owns an
:class:`EventRecorder` and exposes it through the :class:`EventSource`
protocol, so the buffer is never shared across instances.

INVARIANT: ``release_events()`` drains the buffer. A second call in the
same transaction returns an empty list.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Protocol, runtime_checkable
from uuid import uuid4

from pydantic import BaseModel, Field


class DomainEvent(BaseModel):
    """Immutable record of something that happened to an aggregate.

    Subclasses set :attr:`event_type` (dotted, e.g. ``employee.hired``)
    and add their own payload fields.
    """

    model_config = {"frozen": True}

    event_type: ClassVar[str] = "domain.event"

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    aggregate_id: str
    occurred_at: datetime

    @property
    def hook_name(self) -> str:
        """Plugin hook this event dispatches to (``employee.hired`` → ``employee_hired``)."""
        return self.event_type.replace(".", "_")

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe dict including the event type."""
        data = self.model_dump(mode="json")
        data["event_type"] = self.event_type
        return data


class EventRecorder:
    """Per-aggregate buffer of events awaiting release."""

    def __init__(self) -> None:
        self._pending: list[DomainEvent] = []

    def record(self, event: DomainEvent) -> None:
        self._pending.append(event)

    def release(self) -> list[DomainEvent]:
        """Return the buffered events in order and clear the buffer."""
        released, self._pending = self._pending, []
        return released

    def peek(self) -> tuple[DomainEvent, ...]:
        """Buffered events without draining them."""
        return tuple(self._pending)

    def __len__(self) -> int:
        return len(self._pending)


@runtime_checkable
class Identifiable(Protocol):
    """Anything with a stable string identity."""

    @property
    def id(self) -> str: ...


@runtime_checkable
class EventSource(Protocol):
    """Anything that buffers domain events for release after commit."""

    def release_events(self) -> list[DomainEvent]: ...

    def recorded_events(self) -> tuple[DomainEvent, ...]: ...
