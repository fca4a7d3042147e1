"""Identity types for aggregates.

Business keys are human-readable and sequential per prefix, and per year
where the key carries one:

- Employee: ``EMP-YYYY-NNNN``
- Equipment asset tag: ``ASSET-YYYY-NNNN`` (the equipment itself is keyed by UUID4)
- Team: ``TEAM-NNNN``
- Leave request: ``LEAVE-YYYY-NNNN``

Sequence allocation lives in the repositories; this module only knows
the formats.

INVARIANT: IDs are permanent. Once generated, an ID never changes.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import ClassVar, Self

from workforce.domain.errors import InvariantViolation

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    "employee": re.compile(r"^EMP-(\d{4})-(\d{4})$"),
    "asset": re.compile(r"^ASSET-(\d{4})-(\d{4})$"),
    "team": re.compile(r"^TEAM-(\d{4})$"),
    "leave": re.compile(r"^LEAVE-(\d{4})-(\d{4})$"),
}

ID_PREFIXES: dict[str, str] = {
    "employee": "EMP-",
    "asset": "ASSET-",
    "team": "TEAM-",
    "leave": "LEAVE-",
}

# Keys without a year component.
YEARLESS_KINDS = frozenset({"team"})

MAX_SEQUENCE = 9999


def validate_id(value: str, kind: str) -> bool:
    """Check whether *value* matches the expected pattern for *kind*."""
    pattern = ID_PATTERNS.get(kind)
    if pattern is None:
        return False
    return pattern.match(value) is not None


def key_prefix(kind: str, year: int | None = None) -> str:
    """Prefix that sequence numbers are counted under, e.g. ``EMP-2025-``."""
    prefix = ID_PREFIXES[kind]
    if kind in YEARLESS_KINDS:
        return prefix
    if year is None:
        msg = f"{kind} identifiers require a year"
        raise InvariantViolation(msg, rule="id.year")
    return f"{prefix}{year:04d}-"


def format_id(kind: str, sequence: int, year: int | None = None) -> str:
    """Render a business key from its parts."""
    if not 1 <= sequence <= MAX_SEQUENCE:
        msg = f"{kind} sequence out of range: {sequence}"
        raise InvariantViolation(msg, rule="id.sequence")
    return f"{key_prefix(kind, year)}{sequence:04d}"


def parse_sequence(value: str) -> int:
    """Trailing sequence number of a business key (``EMP-2025-0042`` → 42)."""
    return int(value.rsplit("-", 1)[1])


@dataclass(frozen=True)
class BusinessKey:
    """Pattern-checked, human-readable aggregate identity."""

    value: str
    kind: ClassVar[str] = ""

    def __post_init__(self) -> None:
        value = str(self.value).strip()
        if not validate_id(value, self.kind):
            msg = f"Invalid {self.kind} id: {self.value!r}"
            raise InvariantViolation(msg, rule=f"id.{self.kind}")
        object.__setattr__(self, "value", value)

    @classmethod
    def generate(cls, sequence: int, year: int | None = None) -> Self:
        return cls(format_id(cls.kind, sequence, year))

    @property
    def sequence(self) -> int:
        return parse_sequence(self.value)

    @property
    def year(self) -> int | None:
        if self.kind in YEARLESS_KINDS:
            return None
        return int(self.value.split("-")[1])

    def __str__(self) -> str:
        return self.value


class EmployeeId(BusinessKey):
    kind = "employee"


class AssetTag(BusinessKey):
    kind = "asset"


class TeamId(BusinessKey):
    kind = "team"


class LeaveId(BusinessKey):
    kind = "leave"


@dataclass(frozen=True)
class EquipmentId:
    """UUID4 surrogate identity for equipment."""

    value: str

    def __post_init__(self) -> None:
        raw = str(self.value).strip()
        try:
            parsed = uuid.UUID(raw)
        except ValueError as exc:
            msg = f"Invalid equipment id: {self.value!r}"
            raise InvariantViolation(msg, rule="id.equipment") from exc
        object.__setattr__(self, "value", str(parsed))

    @classmethod
    def generate(cls) -> EquipmentId:
        return cls(str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value
