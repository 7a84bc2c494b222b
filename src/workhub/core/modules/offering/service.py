from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from workhub import utils
from workhub.core.core import Service
from workhub.core.modules.counter.models import EntityType
from workhub.core.modules.offering.models import Offering
from workhub.core.modules.validation.validators import ensure_valid, merge_payload
from workhub.core.pagination import PaginationResult, paginate
from workhub.errors import ConflictError, FieldError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

OFFERING_EDITABLE_FIELDS = {"name", "slug", "category", "type", "description", "status"}


class OfferingService(Service):
    """Manages the service catalogue."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("services")

    async def on_start(self) -> None:
        await self._collection.create_index([("slug", 1)], unique=True)
        await self._collection.create_index([("status", 1)])

    async def list_offerings(
        self,
        limit: int = 50,
        offset: int = 0,
        status: str | None = None,
        category: str | None = None,
        search: str | None = None,
    ) -> PaginationResult[Offering]:
        query: dict[str, Any] = {}
        if status:
            query["status"] = status
        if category:
            query["category"] = category
        if search:
            query["search_keywords"] = utils.normalize_key(search)
        return await paginate(self._collection, Offering, query, limit, offset)

    async def get_offering(self, offering_id: str) -> Offering:
        doc = await self._collection.find_one({"_id": offering_id})
        if doc is None:
            raise NotFoundError(f"Service '{offering_id}' not found")
        return Offering.model_validate(doc)

    async def create_offering(self, payload: dict[str, Any], created_by: str = "system") -> Offering:
        ensure_valid(EntityType.SERVICE, payload)
        data = _editable(payload)
        await self._ensure_slug_free(data["slug"])

        offering_id = await self.core.services.counter.allocate(EntityType.SERVICE)
        offering = _with_keywords(Offering(id=offering_id, created_by=created_by, **data))
        try:
            await self._collection.insert_one(offering.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError(f"Service slug '{offering.slug}' already exists") from e
        logger.info("service_created", service_id=offering.id, slug=offering.slug)
        return offering

    async def update_offering(self, offering_id: str, payload: dict[str, Any], partial: bool = False) -> Offering:
        offering = await self.get_offering(offering_id)
        current = offering.model_dump(include=OFFERING_EDITABLE_FIELDS)
        merged = merge_payload(current, payload, nested=("description",)) if partial else payload
        ensure_valid(EntityType.SERVICE, merged)
        data = _editable(merged)
        if data["slug"] != offering.slug:
            await self._ensure_slug_free(data["slug"])

        updated = _with_keywords(Offering.model_validate({**offering.model_dump(exclude=OFFERING_EDITABLE_FIELDS), **data}))
        changes = updated.model_dump(include=OFFERING_EDITABLE_FIELDS | {"search_keywords"})
        try:
            await self._collection.update_one({"_id": offering_id}, {"$set": {**changes, "updated_at": utils.now()}})
        except DuplicateKeyError as e:
            raise ConflictError(f"Service slug '{updated.slug}' already exists") from e
        return await self.get_offering(offering_id)

    async def delete_offering(self, offering_id: str) -> None:
        result = await self._collection.delete_one({"_id": offering_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"Service '{offering_id}' not found")

    async def count(self) -> int:
        return await self._collection.count_documents({})

    async def _ensure_slug_free(self, slug: str) -> None:
        if await self._collection.find_one({"slug": slug}, {"_id": 1}):
            raise ConflictError(f"Service slug '{slug}' already exists")


def _editable(payload: dict[str, Any]) -> dict[str, Any]:
    data = {key: value for key, value in payload.items() if key in OFFERING_EDITABLE_FIELDS and value is not None}
    data["name"] = utils.clean_string(data["name"])
    if not data.get("slug"):
        data["slug"] = utils.slugify(data["name"])
    if not data["slug"]:
        raise ValidationError.from_field_errors([FieldError(field="slug", message=f"slug cannot be derived from name '{data['name']}'")])
    return data


def _with_keywords(offering: Offering) -> Offering:
    return offering.model_copy(update={"search_keywords": utils.build_search_keywords(offering.name, offering.category)})
