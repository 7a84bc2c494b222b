"""Shared persistence for entities that live in a city (buildings and spaces).

Every write here is followed by exactly one statistics event per affected
city, computed from the document state the database returned atomically.
"""

from typing import Any, ClassVar

import structlog
from pydantic import Field
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from workhub import utils
from workhub.core.core import Service
from workhub.core.db import MongoModel
from workhub.core.modules.city.models import Location, city_lookup_key
from workhub.core.modules.counter.models import EntityType
from workhub.core.modules.statistics.models import ChildType
from workhub.core.modules.statistics.service import reporting_failures
from workhub.core.modules.validation.models import Brand
from workhub.core.modules.validation.validators import ensure_valid, merge_payload
from workhub.core.pagination import PaginationResult, paginate
from workhub.errors import NotFoundError

logger = structlog.get_logger(__name__)


class LocatedEntity(MongoModel):
    """Fields common to buildings and spaces."""

    name: str
    description: str = ""
    brand: Brand
    location: Location
    city_id: str  # Weak reference to City, resolved from location on every write
    is_active: bool = True
    search_keywords: list[str] = Field(default_factory=list)


class LocatedEntityService[M: LocatedEntity](Service):
    """CRUD for one located entity type, wired to city resolution and statistics."""

    entity_type: ClassVar[EntityType]
    child_type: ClassVar[ChildType]
    collection_name: ClassVar[str]
    editable_fields: ClassVar[set[str]]
    model: type[M]

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection(self.collection_name)

    async def on_start(self) -> None:
        await self._collection.create_index([("city_id", 1)])
        await self._collection.create_index([("search_keywords", 1)])
        await self._collection.create_index([("created_at", -1)])

    async def list_entities(
        self, limit: int = 50, offset: int = 0, search: str | None = None, **filters: Any
    ) -> PaginationResult[M]:
        """Paginated list, newest first. None-valued filters are ignored."""
        query: dict[str, Any] = {field: value for field, value in filters.items() if value is not None}
        if search:
            query["search_keywords"] = utils.normalize_key(search)
        return await paginate(self._collection, self.model, query, limit, offset)

    async def get(self, entity_id: str) -> M:
        doc = await self._collection.find_one({"_id": entity_id})
        if doc is None:
            raise NotFoundError(f"{self.entity_type.capitalize()} '{entity_id}' not found")
        return self.model.model_validate(doc)

    async def count_by_city(self, city_id: str) -> int:
        return await self._collection.count_documents({"city_id": city_id})

    async def count(self, query: dict[str, Any] | None = None) -> int:
        return await self._collection.count_documents(query or {})

    async def create(self, payload: dict[str, Any]) -> M:
        """Validate, allocate an id, resolve the city, insert, then count the child on its city."""
        ensure_valid(self.entity_type, payload)
        data = self._editable(payload)
        await self._check_references(data, current_id=None)

        entity_id = await self.core.services.counter.allocate(self.entity_type)
        city = await self.core.services.city.find_or_create(Location.model_validate(data["location"]))
        entity = self._with_derived_fields(self.model.model_validate({**data, "_id": entity_id, "city_id": city.id}))
        await self._collection.insert_one(entity.to_mongo())
        logger.info("entity_created", entity_type=self.entity_type, entity_id=entity.id, city_id=city.id)

        with reporting_failures(entity.id):
            await self.core.services.statistics.on_child_created(city.id, self.child_type, entity.is_active)
        return entity

    async def update(self, entity_id: str, payload: dict[str, Any], partial: bool = False) -> M:
        """Replace (PUT) or patch (PATCH) editable fields and move statistics accordingly."""
        entity = await self.get(entity_id)
        current = entity.model_dump(include=self.editable_fields)
        merged = merge_payload(current, payload, nested=("location",)) if partial else payload
        ensure_valid(self.entity_type, merged)
        data = self._editable(merged)
        await self._check_references(data, current_id=entity_id)

        location = Location.model_validate(data["location"])
        city_id = entity.city_id
        if city_lookup_key(location.city, location.province) != city_lookup_key(
            entity.location.city, entity.location.province
        ):
            city_id = (await self.core.services.city.find_or_create(location)).id

        updated = self._with_derived_fields(
            self.model.model_validate(
                {**entity.model_dump(exclude=self.editable_fields), **data, "city_id": city_id, "updated_at": utils.now()}
            )
        )
        changes = updated.model_dump(include=self.editable_fields | {"city_id", "search_keywords", "updated_at"})
        before_doc = await self._collection.find_one_and_update(
            {"_id": entity_id}, {"$set": changes}, return_document=ReturnDocument.BEFORE
        )
        if before_doc is None:
            raise NotFoundError(f"{self.entity_type.capitalize()} '{entity_id}' not found")
        before = self.model.model_validate(before_doc)

        with reporting_failures(entity_id):
            await self._emit_update_events(before, updated)
        return await self.get(entity_id)

    async def delete(self, entity_id: str) -> None:
        """Delete the entity and uncount it; its city record stays."""
        doc = await self._collection.find_one_and_delete({"_id": entity_id})
        if doc is None:
            raise NotFoundError(f"{self.entity_type.capitalize()} '{entity_id}' not found")
        entity = self.model.model_validate(doc)
        logger.info("entity_deleted", entity_type=self.entity_type, entity_id=entity_id, city_id=entity.city_id)

        with reporting_failures(entity_id):
            await self.core.services.statistics.on_child_deleted(entity.city_id, self.child_type, entity.is_active)

    async def _emit_update_events(self, before: M, after: M) -> None:
        statistics = self.core.services.statistics
        if before.city_id != after.city_id:
            await statistics.on_child_deleted(before.city_id, self.child_type, before.is_active)
            await statistics.on_child_created(after.city_id, self.child_type, after.is_active)
        elif before.is_active != after.is_active:
            await statistics.on_child_active_changed(after.city_id, self.child_type, after.is_active)

    async def _check_references(self, data: dict[str, Any], current_id: str | None) -> None:
        """Hook for duplicate and foreign-key checks before writing."""

    def _editable(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = {key: value for key, value in payload.items() if key in self.editable_fields and value is not None}
        if isinstance(data.get("name"), str):
            data["name"] = utils.clean_string(data["name"])
        if isinstance(data.get("location"), dict):
            data["location"] = {
                key: utils.clean_string(value) if isinstance(value, str) else value
                for key, value in data["location"].items()
                if value is not None
            }
        return data

    def _with_derived_fields(self, entity: M) -> M:
        keywords = utils.build_search_keywords(
            entity.name, entity.brand, entity.location.city, entity.location.province, entity.location.address
        )
        return entity.model_copy(update={"search_keywords": keywords})
