"""Enumerations and bounds enforced before anything is persisted."""

from enum import StrEnum


class Brand(StrEnum):
    """Operating brands. The one canonical list; older UI variants are stale."""

    NEXT_SPACE = "NextSpace"
    UNION_SPACE = "UnionSpace"
    CO_SPACE = "CoSpace"


class ServiceStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class OrderStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


NAME_LENGTH = (2, 100)
REGION_LENGTH = (2, 100)  # city and province names
ADDRESS_MIN_LENGTH = 5
CAPACITY_RANGE = (1, 1000)
LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)
TAX_RATE_RANGE = (0.0, 1.0)
