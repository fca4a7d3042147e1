"""Shared persistence helpers: errors, ISO conversion, versioned writes.

Repositories receive a ``Connection`` from the caller's transaction and
never commit on their own.

INVARIANT: An update only succeeds when the stored ``version`` matches
the version the aggregate was loaded with. A mismatch (or a duplicate
key on insert) raises :class:`ConcurrencyConflict`; the whole use-case
must then be retried.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Connection, Table


class NotFoundError(LookupError):
    """No stored aggregate for the requested key."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = str(key)


class ConcurrencyConflict(RuntimeError):
    """A concurrent writer changed the row first."""

    code = "CONFLICT"

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"Concurrent modification of {kind} {key}; retry the operation")
        self.kind = kind
        self.key = str(key)


# ---------------------------------------------------------------------------
# ISO text conversion
# ---------------------------------------------------------------------------


def iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def to_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def to_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# ---------------------------------------------------------------------------
# Versioned writes
# ---------------------------------------------------------------------------


def save_versioned(
    conn: Connection,
    table: Table,
    where: ColumnElement[bool],
    values: dict[str, Any],
    *,
    version: int,
    kind: str,
    key: object,
) -> int:
    """Insert (``version == 0``) or update guarded by *version*.

    Returns the new version number.
    """
    if version == 0:
        try:
            conn.execute(insert(table).values(**values, version=1))
        except IntegrityError as exc:
            raise ConcurrencyConflict(kind, key) from exc
        return 1

    result = conn.execute(
        update(table)
        .where(where, table.c.version == version)
        .values(**values, version=version + 1)
    )
    if result.rowcount != 1:
        raise ConcurrencyConflict(kind, key)
    return version + 1
