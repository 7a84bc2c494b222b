"""Yearly sequence counters behind human-readable entity ids."""

import re
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from workhub.errors import ValidationError
from workhub.utils import now


class EntityType(StrEnum):
    """Types of entities that receive sequential ids."""

    CITY = "city"
    BUILDING = "building"
    SPACE = "space"
    SERVICE = "service"
    ORDER = "order"

    @property
    def prefix(self) -> str:
        return ID_PREFIXES[self]

    @property
    def width(self) -> int:
        """Zero-padding of the sequence part."""
        return 4 if self == EntityType.ORDER else 3


ID_PREFIXES: dict[EntityType, str] = {
    EntityType.CITY: "CIT",
    EntityType.BUILDING: "BLD",
    EntityType.SPACE: "SPC",
    EntityType.SERVICE: "SVC",
    EntityType.ORDER: "ORD",
}

_PREFIX_TO_TYPE = {prefix: entity_type for entity_type, prefix in ID_PREFIXES.items()}
_SEQUENCE_ID_RE = re.compile(r"^([A-Z]{3})(\d{2})(\d{3,})$")


class Counter(BaseModel):
    """Last issued sequence for one (entity_type, scope_year) scope.

    Created by the first allocation in its scope, incremented atomically
    afterwards and never deleted, so numbers are never reused.
    Indexed on (entity_type, scope_year) - unique.
    """

    entity_type: EntityType
    scope_year: int
    last_sequence: int = Field(0, ge=0)  # next number will be last_sequence + 1
    updated_at: datetime = Field(default_factory=now)


class SequenceId(BaseModel):
    """Parsed form of an id like SPC25001."""

    entity_type: EntityType
    year_suffix: int
    sequence: int


def format_sequence_id(entity_type: EntityType, scope_year: int, sequence: int) -> str:
    """Build PREFIX + YY + zero-padded sequence, e.g. ("space", 2025, 1) -> SPC25001."""
    if sequence < 1:
        raise ValueError(f"Sequence must be positive, got {sequence}")
    return f"{entity_type.prefix}{scope_year % 100:02d}{sequence:0{entity_type.width}d}"


def parse_sequence_id(value: str) -> SequenceId:
    """Split a sequence id into its parts. Raises ValidationError for foreign formats."""
    match = _SEQUENCE_ID_RE.fullmatch(value)
    if match is None or match.group(1) not in _PREFIX_TO_TYPE:
        raise ValidationError(f"Invalid id format: '{value}'")
    entity_type = _PREFIX_TO_TYPE[match.group(1)]
    if len(match.group(3)) < entity_type.width:
        raise ValidationError(f"Invalid id format: '{value}'")
    return SequenceId(entity_type=entity_type, year_suffix=int(match.group(2)), sequence=int(match.group(3)))
