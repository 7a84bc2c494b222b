"""Rentable spaces (rooms, desks, halls) inside a city and optionally a building."""

from pydantic import Field

from workhub.core.located import LocatedEntity


def default_operating_hours() -> dict[str, str]:
    weekday = "09:00-18:00"
    return {
        "monday": weekday,
        "tuesday": weekday,
        "wednesday": weekday,
        "thursday": weekday,
        "friday": weekday,
        "saturday": "09:00-17:00",
        "sunday": "Closed",
    }


class Space(LocatedEntity):
    """Bookable space; counted on its city."""

    category: str = "General"  # Name of the service offered in this space
    capacity: int = Field(..., ge=1)
    building_id: str | None = None  # Weak reference, checked on write
    operating_hours: dict[str, str] = Field(default_factory=default_operating_hours)
    images: list[str] = Field(default_factory=list)
    created_by: str = "system"
