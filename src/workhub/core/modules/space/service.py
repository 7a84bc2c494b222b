from typing import Any

from workhub.core.located import LocatedEntityService
from workhub.core.modules.counter.models import EntityType
from workhub.core.modules.space.models import Space
from workhub.core.modules.statistics.models import ChildType


class SpaceService(LocatedEntityService[Space]):
    """Manages spaces; a referenced building must exist."""

    entity_type = EntityType.SPACE
    child_type = ChildType.SPACE
    collection_name = "spaces"
    editable_fields = {
        "name",
        "description",
        "brand",
        "category",
        "capacity",
        "location",
        "building_id",
        "operating_hours",
        "images",
        "is_active",
    }
    model = Space

    async def on_start(self) -> None:
        await super().on_start()
        await self._collection.create_index([("building_id", 1)])
        await self._collection.create_index([("category", 1)])

    async def _check_references(self, data: dict[str, Any], current_id: str | None) -> None:
        if data.get("building_id"):
            # Raises NotFoundError for dangling references
            await self.core.services.building.get(data["building_id"])
