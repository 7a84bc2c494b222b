from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from workhub import utils
from workhub.core.core import Service
from workhub.core.modules.city.models import AUTO_CREATED_BY, City, Location, city_lookup_key
from workhub.core.modules.counter.models import EntityType
from workhub.core.modules.validation.validators import ensure_valid, merge_payload
from workhub.core.pagination import PaginationResult, paginate
from workhub.errors import ConflictError, NotFoundError

logger = structlog.get_logger(__name__)

# Fields writable through the API; statistics belong to StatisticsService
CITY_EDITABLE_FIELDS = {
    "name",
    "province",
    "country",
    "timezone",
    "utc_offset",
    "postal_codes",
    "latitude",
    "longitude",
    "business_info",
    "thumbnail",
    "is_active",
}


class CityService(Service):
    """Manages cities and resolves building/space locations to city records."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("cities")

    async def on_start(self) -> None:
        # One city per normalized name+province, also under concurrent auto-creation
        await self._collection.create_index([("lookup_key", 1)], unique=True)
        await self._collection.create_index([("search_keywords", 1)])
        await self._collection.create_index([("is_active", 1)])

    async def list_cities(
        self, limit: int = 50, offset: int = 0, is_active: bool | None = None, search: str | None = None
    ) -> PaginationResult[City]:
        query: dict[str, Any] = {}
        if is_active is not None:
            query["is_active"] = is_active
        if search:
            query["search_keywords"] = utils.normalize_key(search)
        return await paginate(self._collection, City, query, limit, offset)

    async def get_city(self, city_id: str) -> City:
        doc = await self._collection.find_one({"_id": city_id})
        if doc is None:
            raise NotFoundError(f"City '{city_id}' not found")
        return City.model_validate(doc)

    async def find_city(self, name: str, province: str) -> City | None:
        doc = await self._collection.find_one({"lookup_key": city_lookup_key(name, province)})
        return City.model_validate(doc) if doc else None

    async def create_city(self, payload: dict[str, Any], created_by: str = "system") -> City:
        """Validate and insert a city with a fresh CIT id."""
        ensure_valid(EntityType.CITY, payload)
        data = _editable(payload)
        if await self.find_city(data["name"], data["province"]):
            raise ConflictError(f"City '{data['name']}' already exists in {data['province']}")

        city_id = await self.core.services.counter.allocate(EntityType.CITY)
        city = _with_derived_fields(City(id=city_id, created_by=created_by, **data))
        try:
            await self._collection.insert_one(city.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError(f"City '{city.name}' already exists in {city.province}") from e
        logger.info("city_created", city_id=city.id, name=city.name)
        return city

    async def find_or_create(self, location: Location) -> City:
        """Resolve a location to its city, creating the city when it is unknown.

        Two requests auto-creating the same city race on the unique lookup key;
        the loser reuses the winner's record (its allocated id is simply skipped).
        """
        city = await self.find_city(location.city, location.province)
        if city is not None:
            return city

        city_id = await self.core.services.counter.allocate(EntityType.CITY)
        city = _with_derived_fields(
            City(
                id=city_id,
                name=utils.clean_string(location.city),
                province=utils.clean_string(location.province),
                country=location.country or self.core.config.default_country,
                timezone=self.core.config.default_timezone,
                postal_codes=[location.postal_code] if location.postal_code else [],
                created_by=AUTO_CREATED_BY,
            )
        )
        try:
            await self._collection.insert_one(city.to_mongo())
        except DuplicateKeyError:
            existing = await self.find_city(location.city, location.province)
            if existing is None:
                raise
            logger.debug("city_auto_create_lost_race", city_id=existing.id, skipped_id=city_id)
            return existing
        logger.info("city_auto_created", city_id=city.id, name=city.name, reason="location")
        return city

    async def update_city(self, city_id: str, payload: dict[str, Any], partial: bool = False) -> City:
        """Replace (PUT) or patch (PATCH) editable fields. Statistics are never touched."""
        city = await self.get_city(city_id)
        current = city.model_dump(include=CITY_EDITABLE_FIELDS)
        merged = merge_payload(current, payload, nested=("business_info",)) if partial else payload
        ensure_valid(EntityType.CITY, merged)

        data = _editable(merged)
        existing = await self.find_city(data["name"], data["province"])
        if existing is not None and existing.id != city_id:
            raise ConflictError(f"City '{data['name']}' already exists in {data['province']}")

        updated = _with_derived_fields(City.model_validate({**city.model_dump(exclude=CITY_EDITABLE_FIELDS), **data}))
        changes = updated.model_dump(include=CITY_EDITABLE_FIELDS | {"search_keywords", "lookup_key"})
        try:
            await self._collection.update_one({"_id": city_id}, {"$set": {**changes, "updated_at": utils.now()}})
        except DuplicateKeyError as e:
            raise ConflictError(f"City '{updated.name}' already exists in {updated.province}") from e
        return await self.get_city(city_id)

    async def delete_city(self, city_id: str) -> None:
        """Delete a city that no building or space refers to."""
        city = await self.get_city(city_id)
        buildings = await self.core.services.building.count_by_city(city_id)
        spaces = await self.core.services.space.count_by_city(city_id)
        if buildings or spaces:
            raise ConflictError(f"City '{city.name}' still has {buildings} building(s) and {spaces} space(s)")

        result = await self._collection.delete_one({"_id": city_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"City '{city_id}' not found")
        logger.info("city_deleted", city_id=city_id)

    async def count(self) -> int:
        return await self._collection.count_documents({})


def _editable(payload: dict[str, Any]) -> dict[str, Any]:
    data = {key: value for key, value in payload.items() if key in CITY_EDITABLE_FIELDS and value is not None}
    for key in ("name", "province", "country"):
        if isinstance(data.get(key), str):
            data[key] = utils.clean_string(data[key])
    return data


def _with_derived_fields(city: City) -> City:
    return city.model_copy(
        update={
            "lookup_key": city_lookup_key(city.name, city.province),
            "search_keywords": utils.build_search_keywords(city.name, city.province, city.country),
        }
    )
