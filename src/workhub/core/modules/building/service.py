from typing import Any

from workhub.core.located import LocatedEntityService
from workhub.core.modules.building.models import Building
from workhub.core.modules.counter.models import EntityType
from workhub.core.modules.statistics.models import ChildType
from workhub.errors import ConflictError


class BuildingService(LocatedEntityService[Building]):
    """Manages buildings; building names are unique within a city."""

    entity_type = EntityType.BUILDING
    child_type = ChildType.BUILDING
    collection_name = "buildings"
    editable_fields = {"name", "description", "brand", "location", "is_active", "amenities", "thumbnail"}
    model = Building

    async def on_start(self) -> None:
        await super().on_start()
        await self._collection.create_index([("brand", 1)])

    async def _check_references(self, data: dict[str, Any], current_id: str | None) -> None:
        query: dict[str, Any] = {"name": data["name"], "location.city": data["location"]["city"]}
        if current_id is not None:
            query["_id"] = {"$ne": current_id}
        if await self._collection.find_one(query, {"_id": 1}):
            raise ConflictError(f"A building named '{data['name']}' already exists in {data['location']['city']}")
