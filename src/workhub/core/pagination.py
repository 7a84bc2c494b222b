from typing import Any, TypeVar

from pydantic import BaseModel, Field
from pymongo.asynchronous.collection import AsyncCollection

from workhub.core.db import MongoModel

M = TypeVar("M", bound=MongoModel)

DEFAULT_SORT: list[tuple[str, int]] = [("created_at", -1), ("_id", -1)]


class PaginationResult[T](BaseModel):
    """Pagination result wrapper for list endpoints."""

    items: list[T] = Field(..., description="List of items in current page")
    total: int = Field(..., description="Total number of items across all pages", ge=0)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    offset: int = Field(..., description="Number of items skipped", ge=0)

    @property
    def has_more(self) -> bool:
        """Whether there are more items beyond the current page."""
        return self.offset + len(self.items) < self.total


async def paginate(
    collection: AsyncCollection[dict[str, Any]],
    model: type[M],
    query: dict[str, Any],
    limit: int,
    offset: int,
    sort: list[tuple[str, int]] | None = None,
) -> PaginationResult[M]:
    """Run a filtered, sorted, paginated find and wrap the result."""
    total = await collection.count_documents(query)
    cursor = collection.find(query).sort(sort or DEFAULT_SORT).skip(offset).limit(limit)
    docs = await cursor.to_list()
    return PaginationResult(items=[model.model_validate(doc) for doc in docs], total=total, limit=limit, offset=offset)
