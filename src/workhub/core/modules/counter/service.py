from typing import Any

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from workhub.core.core import Service
from workhub.core.db import retry_on_duplicate_key
from workhub.core.modules.counter.models import Counter, EntityType, format_sequence_id
from workhub.utils import now

logger = structlog.get_logger(__name__)


class CounterService(Service):
    """Issues unique, monotonically increasing ids per entity type and year."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("counters")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        # One counter document per scope; concurrent first allocations collide here
        await self._collection.create_index([("entity_type", 1), ("scope_year", 1)], unique=True)

    async def allocate(self, entity_type: EntityType, scope_year: int | None = None) -> str:
        """Allocate the next id for an entity type, e.g. SPC25001.

        The year defaults to the current UTC year. Each year is its own scope,
        so the first allocation of a new year starts again at 1 while earlier
        years keep their counters.

        Raises:
            RetryableConflictError: if the atomic increment kept losing races
        """
        year = scope_year if scope_year is not None else now().year
        sequence = await self.next_sequence(entity_type, year)
        sequence_id = format_sequence_id(entity_type, year, sequence)
        logger.debug("sequence_allocated", entity_type=entity_type, scope_year=year, sequence_id=sequence_id)
        return sequence_id

    async def next_sequence(self, entity_type: EntityType, scope_year: int) -> int:
        """Atomically increment and return the next sequence number for a scope."""

        async def increment() -> dict[str, Any] | None:
            return await self._collection.find_one_and_update(
                {"entity_type": entity_type, "scope_year": scope_year},
                {"$inc": {"last_sequence": 1}, "$set": {"updated_at": now()}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )

        result = await retry_on_duplicate_key(
            increment, self.core.config.counter_retry_attempts, f"counter {entity_type}/{scope_year}"
        )
        # $inc on an upserted document starts from 0, so the first value is 1
        return int(result["last_sequence"])

    async def peek(self, entity_type: EntityType, scope_year: int) -> int:
        """Get the last issued sequence number without incrementing."""
        doc = await self._collection.find_one({"entity_type": entity_type, "scope_year": scope_year})
        if doc:
            return Counter.model_validate(doc).last_sequence
        return 0
