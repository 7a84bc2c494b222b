from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pymongo.errors import DuplicateKeyError

from workhub.errors import RetryableConflictError
from workhub.utils import now

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class MongoModel(BaseModel):
    """Document keyed by its human-readable sequence id (e.g. BLD25001)."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return data


async def retry_on_duplicate_key(operation: Callable[[], Awaitable[T]], attempts: int, what: str) -> T:
    """Run an upserting operation, retrying when a concurrent upsert won the insert race.

    A losing upsert fails as a whole, so retrying is safe: the next attempt
    matches the document the winner created.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except DuplicateKeyError:
            logger.debug("duplicate_key_retry", what=what, attempt=attempt)
    raise RetryableConflictError(f"Could not update {what} after {attempts} attempts, please retry")
