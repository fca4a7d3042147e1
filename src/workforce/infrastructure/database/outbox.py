"""Transactional outbox for domain events.

Events released by aggregates are written here inside the same
transaction as the aggregate rows, so a committed change always has its
events on record. Dispatch happens after commit (see ``EventBus``).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from sqlalchemy import func, insert, select

from workforce.infrastructure.database.schema import event_outbox

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Connection

    from workforce.domain.events import DomainEvent


def append_events(conn: Connection, events: Iterable[DomainEvent], *, created: str) -> list[int]:
    """Insert *events* as pending outbox rows. Returns row ids in order."""
    ids: list[int] = []
    for domain_event in events:
        result = conn.execute(
            insert(event_outbox).values(
                event_id=domain_event.event_id,
                event_type=domain_event.event_type,
                hook_name=domain_event.hook_name,
                aggregate_id=domain_event.aggregate_id,
                payload=json.dumps(domain_event.to_payload()),
                status="pending",
                retries=0,
                created=created,
            )
        )
        assert result.inserted_primary_key is not None
        ids.append(int(result.inserted_primary_key[0]))
    return ids


def status_counts(conn: Connection) -> dict[str, int]:
    """Number of outbox rows per status."""
    rows = conn.execute(
        select(event_outbox.c.status, func.count()).group_by(event_outbox.c.status)
    )
    return {status: int(count) for status, count in rows}
