from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from workhub.core.core import Service
from workhub.core.db import retry_on_duplicate_key
from workhub.core.modules.city.models import AUTO_CREATED_BY, City
from workhub.core.modules.statistics.models import ChildType, CityStatistics, StatisticsEvent, StatisticsEventKind
from workhub.errors import StatisticsUpdateError
from workhub.utils import now

logger = structlog.get_logger(__name__)


@contextmanager
def reporting_failures(entity_id: str) -> Iterator[None]:
    """Turn any statistics failure into StatisticsUpdateError naming the already persisted entity."""
    try:
        yield
    except Exception as e:
        logger.exception("statistics_update_failed", entity_id=entity_id)
        raise StatisticsUpdateError(entity_id, e) from e


class StatisticsService(Service):
    """Keeps City.statistics in step with building and space events.

    Every change is an atomic, filtered update of the city document, so
    0 <= active <= total holds whatever order events arrive in. Counters are
    never recomputed by scanning children.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("cities")

    async def on_child_created(self, city_id: str, child_type: ChildType, is_active: bool = True) -> None:
        await self.apply_event(city_id, StatisticsEvent(kind=StatisticsEventKind.CREATED, child_type=child_type, is_active=is_active))

    async def on_child_active_changed(self, city_id: str, child_type: ChildType, is_active: bool) -> None:
        await self.apply_event(
            city_id, StatisticsEvent(kind=StatisticsEventKind.ACTIVE_CHANGED, child_type=child_type, is_active=is_active)
        )

    async def on_child_deleted(self, city_id: str, child_type: ChildType, was_active: bool) -> None:
        await self.apply_event(city_id, StatisticsEvent(kind=StatisticsEventKind.DELETED, child_type=child_type, is_active=was_active))

    async def apply_event(self, city_id: str, event: StatisticsEvent) -> None:
        """Apply one event's delta to the city, creating a placeholder city when it does not exist."""
        delta = event.delta()
        logger.debug("statistics_event", city_id=city_id, kind=event.kind, child_type=event.child_type, delta=delta)
        if event.kind == StatisticsEventKind.CREATED:
            await self._increment(city_id, delta)
        else:
            await self._ensure_city(city_id)
            await self._apply_guarded(city_id, event)

    async def get_statistics(self, city_id: str) -> CityStatistics:
        doc = await self._collection.find_one({"_id": city_id}, {"statistics": 1})
        if doc is None:
            return CityStatistics()
        return CityStatistics.model_validate(doc.get("statistics", {}))

    async def _increment(self, city_id: str, delta: dict[str, int]) -> None:
        inc = {f"statistics.{field}": change for field, change in delta.items()}
        placeholder = _placeholder_document(city_id, skip_statistics=set(delta))

        async def upsert() -> Any:
            return await self._collection.update_one(
                {"_id": city_id},
                {"$inc": inc, "$set": {"updated_at": now()}, "$setOnInsert": placeholder},
                upsert=True,
            )

        result = await retry_on_duplicate_key(upsert, self.core.config.counter_retry_attempts, f"statistics of city {city_id}")
        if result.upserted_id is not None:
            logger.info("city_auto_created", city_id=city_id, reason="statistics")

    async def _apply_guarded(self, city_id: str, event: StatisticsEvent) -> None:
        """Apply a toggle or deletion without ever leaving 0 <= active <= total.

        A step whose filter misses is skipped and reported as clamped.
        """
        steps = event.steps()
        if len(steps) > 1:
            # Active child deleted: both counters drop together while both are positive
            result = await self._collection.update_one(
                {"_id": city_id, **{f"statistics.{field}": {"$gt": 0} for field, _ in steps}},
                {"$inc": {f"statistics.{field}": change for field, change in steps}, "$set": {"updated_at": now()}},
            )
            if result.matched_count:
                return

        clamped = []
        for field, change in steps:
            result = await self._collection.update_one(
                {"_id": city_id, **_step_filter(event, field, change)},
                {"$inc": {f"statistics.{field}": change}, "$set": {"updated_at": now()}},
            )
            if not result.matched_count:
                clamped.append(field)
        if clamped:
            logger.warning(
                "statistic_clamped",
                city_id=city_id,
                fields=clamped,
                kind=event.kind,
                child_type=event.child_type,
            )

    async def _ensure_city(self, city_id: str) -> None:
        async def upsert() -> Any:
            return await self._collection.update_one(
                {"_id": city_id}, {"$setOnInsert": _placeholder_document(city_id)}, upsert=True
            )

        result = await retry_on_duplicate_key(upsert, self.core.config.counter_retry_attempts, f"city {city_id}")
        if result.upserted_id is not None:
            logger.info("city_auto_created", city_id=city_id, reason="statistics")


def _step_filter(event: StatisticsEvent, field: str, change: int) -> dict[str, Any]:
    """Update filter matching only when StatisticsEvent.allows would accept the step."""
    total = f"$statistics.{event.child_type.total_field}"
    active = f"$statistics.{event.child_type.active_field}"
    if change > 0:
        if field == event.child_type.total_field:
            return {}
        return {"$expr": {"$lt": [active, total]}}
    if field == event.child_type.active_field:
        return {f"statistics.{field}": {"$gt": 0}}
    return {"$expr": {"$gt": [total, active]}}


def _placeholder_document(city_id: str, skip_statistics: set[str] | None = None) -> dict[str, Any]:
    """Fields of a minimal city, for $setOnInsert.

    Statistics being incremented in the same update are left out, since one
    update may not touch the same path twice.
    """
    doc = City(id=city_id, name=city_id, province="", created_by=AUTO_CREATED_BY, lookup_key=f"{city_id.lower()}|").to_mongo()
    for key in ("_id", "updated_at", "statistics"):
        doc.pop(key)
    for field, value in CityStatistics().model_dump().items():
        if field not in (skip_statistics or set()):
            doc[f"statistics.{field}"] = value
    return doc
