from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from workhub.core.modules.order.models import Order
from workhub.core.modules.validation.models import OrderStatus
from workhub.core.pagination import PaginationResult
from workhub.web.deps import AdminDep, AppDep
from workhub.web.openapi import ApiResponse, DeletedResponse, ErrorResponse, ok

router = APIRouter(tags=["orders"])


class OrderRequest(BaseModel):
    """Booking of a space."""

    customer_name: str | None = None
    customer_email: str | None = None
    space_id: str | None = Field(None, description="Booked space, e.g. SPC25001")
    amount: float | None = Field(None, description="Price in the city's currency")
    duration: int | None = Field(None, description="Booked units (hours or days)")
    status: str | None = Field(None, description="pending, confirmed, active, completed or cancelled")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Budi Santoso",
                    "customer_email": "budi@example.com",
                    "space_id": "SPC25001",
                    "amount": 250000,
                    "duration": 2,
                }
            ]
        }
    }


_WRITE_ERRORS = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    401: {"model": ErrorResponse, "description": "Admin token required"},
    404: {"model": ErrorResponse, "description": "Order or space not found"},
}


@router.get(
    "/orders",
    summary="List orders",
    operation_id="listOrders",
    responses={200: {"description": "Paginated orders"}},
)
async def list_orders(
    app: AppDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    status: OrderStatus | None = None,
    space_id: str | None = None,
    search: str | None = None,
) -> ApiResponse[PaginationResult[Order]]:
    return ok(await app.list_orders(limit, offset, status, space_id, search))


@router.get(
    "/orders/{order_id}",
    summary="Get order",
    operation_id="getOrder",
    responses={
        200: {"description": "Order details"},
        404: {"model": ErrorResponse, "description": "Order not found"},
    },
)
async def get_order(order_id: str, app: AppDep) -> ApiResponse[Order]:
    return ok(await app.get_order(order_id))


@router.post(
    "/orders",
    summary="Create order",
    description="Create an order with a new ORD id for an existing space.",
    operation_id="createOrder",
    status_code=201,
    responses={201: {"description": "Order created"}, **_WRITE_ERRORS},
)
async def create_order(req: OrderRequest, app: AppDep, _: AdminDep) -> ApiResponse[Order]:
    return ok(await app.create_order(req.model_dump(exclude_unset=True)))


@router.put(
    "/orders/{order_id}",
    summary="Replace order",
    operation_id="replaceOrder",
    responses={200: {"description": "Order updated"}, **_WRITE_ERRORS},
)
async def replace_order(order_id: str, req: OrderRequest, app: AppDep, _: AdminDep) -> ApiResponse[Order]:
    return ok(await app.update_order(order_id, req.model_dump(exclude_unset=True), partial=False))


@router.patch(
    "/orders/{order_id}",
    summary="Update order",
    description="Partial update, typically a status change.",
    operation_id="updateOrder",
    responses={200: {"description": "Order updated"}, **_WRITE_ERRORS},
)
async def update_order(order_id: str, req: OrderRequest, app: AppDep, _: AdminDep) -> ApiResponse[Order]:
    return ok(await app.update_order(order_id, req.model_dump(exclude_unset=True), partial=True))


@router.delete(
    "/orders/{order_id}",
    summary="Delete order",
    operation_id="deleteOrder",
    responses={
        200: {"description": "Order deleted"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        404: {"model": ErrorResponse, "description": "Order not found"},
    },
)
async def delete_order(order_id: str, app: AppDep, _: AdminDep) -> ApiResponse[DeletedResponse]:
    await app.delete_order(order_id)
    return ok(DeletedResponse(id=order_id))
