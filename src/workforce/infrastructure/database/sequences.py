"""Business-key allocation by inspecting the highest existing sequence.

``EMP-2025-0007`` is followed by ``EMP-2025-0008``; the first key of a
new year restarts at ``0001``. Keys are fixed-width, so the textual
maximum under a prefix is also the numeric maximum.

The caller owns the transaction — pass a ``Connection`` obtained from
``engine.begin()`` so the lookup and the insert that follows happen
under the same write lock.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from workforce.domain.ids import format_id, key_prefix, parse_sequence

if TYPE_CHECKING:
    from sqlalchemy import Column, Connection


def next_business_key(
    conn: Connection,
    column: Column[str],
    kind: str,
    year: int | None = None,
) -> str:
    """Claim the next key for *kind* (and *year*) stored in *column*.

    Args:
        conn: Active SQLAlchemy connection (caller owns the transaction).
        column: The table column holding keys of this kind.
        kind: One of ``employee``, ``asset``, ``team``, ``leave``.
        year: Calendar year for year-scoped keys; ignored for teams.

    Returns:
        The new key string (e.g. ``"EMP-2025-0001"``).
    """
    prefix = key_prefix(kind, year)
    highest = conn.execute(select(func.max(column)).where(column.like(f"{prefix}%"))).scalar()
    sequence = parse_sequence(highest) + 1 if highest else 1
    return format_id(kind, sequence, year)
