from pydantic import Field

from workhub.core.located import LocatedEntity


class Building(LocatedEntity):
    """Co-working building operated under one brand; counted on its city."""

    amenities: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
