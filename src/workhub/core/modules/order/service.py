from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from workhub import utils
from workhub.core.core import Service
from workhub.core.modules.counter.models import EntityType
from workhub.core.modules.order.models import Order
from workhub.core.modules.validation.models import OrderStatus
from workhub.core.modules.validation.validators import ensure_valid, merge_payload
from workhub.core.pagination import PaginationResult, paginate
from workhub.errors import NotFoundError

logger = structlog.get_logger(__name__)

ORDER_EDITABLE_FIELDS = {"customer_name", "customer_email", "space_id", "amount", "duration", "status"}


class OrderService(Service):
    """Manages orders placed for spaces."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("orders")

    async def on_start(self) -> None:
        await self._collection.create_index([("status", 1)])
        await self._collection.create_index([("space_id", 1)])
        await self._collection.create_index([("created_at", -1)])

    async def list_orders(
        self,
        limit: int = 50,
        offset: int = 0,
        status: OrderStatus | None = None,
        space_id: str | None = None,
        search: str | None = None,
    ) -> PaginationResult[Order]:
        query: dict[str, Any] = {}
        if status:
            query["status"] = status
        if space_id:
            query["space_id"] = space_id
        if search:
            query["search_keywords"] = utils.normalize_key(search)
        return await paginate(self._collection, Order, query, limit, offset)

    async def get_order(self, order_id: str) -> Order:
        doc = await self._collection.find_one({"_id": order_id})
        if doc is None:
            raise NotFoundError(f"Order '{order_id}' not found")
        return Order.model_validate(doc)

    async def create_order(self, payload: dict[str, Any]) -> Order:
        """Validate, check the space exists, then insert with a fresh ORD id."""
        ensure_valid(EntityType.ORDER, payload)
        data = _editable(payload)
        space = await self.core.services.space.get(data["space_id"])

        order_id = await self.core.services.counter.allocate(EntityType.ORDER)
        order = _with_keywords(Order(id=order_id, space_name=space.name, **data))
        await self._collection.insert_one(order.to_mongo())
        logger.info("order_created", order_id=order.id, space_id=space.id, amount=order.amount)
        return order

    async def update_order(self, order_id: str, payload: dict[str, Any], partial: bool = False) -> Order:
        order = await self.get_order(order_id)
        current = order.model_dump(include=ORDER_EDITABLE_FIELDS)
        merged = merge_payload(current, payload) if partial else payload
        ensure_valid(EntityType.ORDER, merged)
        data = _editable(merged)

        space_name = order.space_name
        if data["space_id"] != order.space_id:
            space_name = (await self.core.services.space.get(data["space_id"])).name

        updated = _with_keywords(
            Order.model_validate({**order.model_dump(exclude=ORDER_EDITABLE_FIELDS), **data, "space_name": space_name})
        )
        changes = updated.model_dump(include=ORDER_EDITABLE_FIELDS | {"space_name", "search_keywords"})
        await self._collection.update_one({"_id": order_id}, {"$set": {**changes, "updated_at": utils.now()}})
        if updated.status != order.status:
            logger.info("order_status_changed", order_id=order_id, old_status=order.status, new_status=updated.status)
        return await self.get_order(order_id)

    async def delete_order(self, order_id: str) -> None:
        result = await self._collection.delete_one({"_id": order_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"Order '{order_id}' not found")

    async def count_by_status(self) -> dict[OrderStatus, int]:
        return {status: await self._collection.count_documents({"status": status}) for status in OrderStatus}

    async def completed_revenue(self) -> float:
        """Sum of amounts of completed orders."""
        revenue = 0.0
        async for doc in self._collection.find({"status": OrderStatus.COMPLETED}, {"amount": 1}):
            revenue += float(doc.get("amount", 0))
        return revenue


def _editable(payload: dict[str, Any]) -> dict[str, Any]:
    data = {key: value for key, value in payload.items() if key in ORDER_EDITABLE_FIELDS and value is not None}
    for key in ("customer_name", "customer_email", "space_id"):
        data[key] = utils.clean_string(data[key])
    return data


def _with_keywords(order: Order) -> Order:
    return order.model_copy(update={"search_keywords": utils.build_search_keywords(order.customer_name, order.space_name)})
