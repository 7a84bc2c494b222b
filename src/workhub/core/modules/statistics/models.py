"""Denormalized per-city counters and the child events that move them."""

from enum import StrEnum

from pydantic import BaseModel, Field


class ChildType(StrEnum):
    """Entities counted on their city."""

    BUILDING = "building"
    SPACE = "space"

    @property
    def total_field(self) -> str:
        return f"total_{self}s"

    @property
    def active_field(self) -> str:
        return f"active_{self}s"


class CityStatistics(BaseModel):
    """Counters stored on the city document, maintained only through StatisticsEvent deltas."""

    total_buildings: int = Field(0, ge=0)
    active_buildings: int = Field(0, ge=0)
    total_spaces: int = Field(0, ge=0)
    active_spaces: int = Field(0, ge=0)


class StatisticsEventKind(StrEnum):
    CREATED = "created"
    ACTIVE_CHANGED = "active_changed"
    DELETED = "deleted"


class StatisticsEvent(BaseModel):
    """Something that happened to one child of a city.

    For CREATED and ACTIVE_CHANGED, is_active is the child's new state;
    for DELETED it is the state the child had when it was removed.
    """

    kind: StatisticsEventKind
    child_type: ChildType
    is_active: bool

    def delta(self) -> dict[str, int]:
        """Statistic field -> signed change. Increments and decrements never mix in one event."""
        total, active = self.child_type.total_field, self.child_type.active_field
        if self.kind == StatisticsEventKind.CREATED:
            return {total: 1, active: 1} if self.is_active else {total: 1}
        if self.kind == StatisticsEventKind.ACTIVE_CHANGED:
            return {active: 1 if self.is_active else -1}
        return {total: -1, active: -1} if self.is_active else {total: -1}

    def steps(self) -> list[tuple[str, int]]:
        """The delta ordered so that active <= total holds after every single step."""
        steps = list(self.delta().items())
        return steps if self.kind == StatisticsEventKind.CREATED else steps[::-1]

    def allows(self, field: str, change: int, values: dict[str, int]) -> bool:
        """Whether one step may be applied to the current counter values.

        An active count only rises below its total, and a total only falls
        above its active count. StatisticsService expresses the same rule as
        update filters.
        """
        total, active = self.child_type.total_field, self.child_type.active_field
        if change > 0:
            return field == total or values[active] < values[total]
        if field == active:
            return values[active] > 0
        return values[total] > values[active]

    def apply(self, statistics: CityStatistics) -> tuple[CityStatistics, list[str]]:
        """Apply the delta in memory, clamping steps that would break 0 <= active <= total.

        Returns the new statistics and the fields that were left unchanged.
        """
        values = statistics.model_dump()
        clamped = []
        for field, change in self.steps():
            if self.allows(field, change, values):
                values[field] += change
            else:
                clamped.append(field)
        return CityStatistics.model_validate(values), clamped
