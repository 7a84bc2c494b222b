from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from workhub.core.modules.offering.models import Offering
from workhub.core.pagination import PaginationResult
from workhub.web.deps import AdminDep, AppDep
from workhub.web.openapi import ApiResponse, DeletedResponse, ErrorResponse, ok

router = APIRouter(tags=["services"])


class DescriptionInput(BaseModel):
    short: str | None = None
    long: str | None = None


class ServiceRequest(BaseModel):
    """Service catalogue entry."""

    name: str | None = None
    slug: str | None = Field(None, description="Unique URL-friendly id; derived from the name when omitted")
    category: str | None = None
    type: str | None = None
    description: DescriptionInput | None = None
    status: str | None = Field(None, description="draft, published or archived")

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Meeting Room", "category": "rooms", "description": {"short": "Hourly rooms"}}]
        }
    }


_WRITE_ERRORS = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    401: {"model": ErrorResponse, "description": "Admin token required"},
    409: {"model": ErrorResponse, "description": "Slug already in use"},
}


@router.get(
    "/services",
    summary="List services",
    operation_id="listServices",
    responses={200: {"description": "Paginated services"}},
)
async def list_services(
    app: AppDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    status: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> ApiResponse[PaginationResult[Offering]]:
    return ok(await app.list_services(limit, offset, status, category, search))


@router.get(
    "/services/{service_id}",
    summary="Get service",
    operation_id="getService",
    responses={
        200: {"description": "Service details"},
        404: {"model": ErrorResponse, "description": "Service not found"},
    },
)
async def get_service(service_id: str, app: AppDep) -> ApiResponse[Offering]:
    return ok(await app.get_service(service_id))


@router.post(
    "/services",
    summary="Create service",
    operation_id="createService",
    status_code=201,
    responses={201: {"description": "Service created"}, **_WRITE_ERRORS},
)
async def create_service(req: ServiceRequest, app: AppDep, _: AdminDep) -> ApiResponse[Offering]:
    return ok(await app.create_service(req.model_dump(exclude_unset=True)))


@router.put(
    "/services/{service_id}",
    summary="Replace service",
    operation_id="replaceService",
    responses={
        200: {"description": "Service updated"},
        404: {"model": ErrorResponse, "description": "Service not found"},
        **_WRITE_ERRORS,
    },
)
async def replace_service(service_id: str, req: ServiceRequest, app: AppDep, _: AdminDep) -> ApiResponse[Offering]:
    return ok(await app.update_service(service_id, req.model_dump(exclude_unset=True), partial=False))


@router.patch(
    "/services/{service_id}",
    summary="Update service",
    operation_id="updateService",
    responses={
        200: {"description": "Service updated"},
        404: {"model": ErrorResponse, "description": "Service not found"},
        **_WRITE_ERRORS,
    },
)
async def update_service(service_id: str, req: ServiceRequest, app: AppDep, _: AdminDep) -> ApiResponse[Offering]:
    return ok(await app.update_service(service_id, req.model_dump(exclude_unset=True), partial=True))


@router.delete(
    "/services/{service_id}",
    summary="Delete service",
    operation_id="deleteService",
    responses={
        200: {"description": "Service deleted"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        404: {"model": ErrorResponse, "description": "Service not found"},
    },
)
async def delete_service(service_id: str, app: AppDep, _: AdminDep) -> ApiResponse[DeletedResponse]:
    await app.delete_service(service_id)
    return ok(DeletedResponse(id=service_id))
