from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from workhub.core.modules.space.models import Space
from workhub.core.pagination import PaginationResult
from workhub.web.deps import AdminDep, AppDep
from workhub.web.openapi import ApiResponse, DeletedResponse, ErrorResponse, ok
from workhub.web.routers.buildings import LocationInput

router = APIRouter(tags=["spaces"])


class SpaceRequest(BaseModel):
    """Space fields."""

    name: str | None = None
    description: str | None = None
    brand: str | None = Field(None, description="One of NextSpace, UnionSpace, CoSpace")
    category: str | None = Field(None, description="Name of the service offered in this space")
    capacity: int | None = Field(None, description="Number of people, 1-1000")
    location: LocationInput | None = None
    building_id: str | None = Field(None, description="Building containing the space, if any")
    operating_hours: dict[str, str] | None = None
    images: list[str] | None = None
    is_active: bool | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Meeting Room A",
                    "brand": "NextSpace",
                    "category": "Meeting Room",
                    "capacity": 12,
                    "location": {"address": "Jl. Gatot Subroto 12", "city": "Medan", "province": "North Sumatra"},
                }
            ]
        }
    }


_WRITE_ERRORS = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    401: {"model": ErrorResponse, "description": "Admin token required"},
    404: {"model": ErrorResponse, "description": "Space or referenced building not found"},
    500: {"model": ErrorResponse, "description": "Saved, but city statistics could not be updated"},
}


@router.get(
    "/spaces",
    summary="List spaces",
    operation_id="listSpaces",
    responses={200: {"description": "Paginated spaces"}},
)
async def list_spaces(
    app: AppDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    brand: str | None = None,
    city_id: str | None = None,
    building_id: str | None = None,
    category: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> ApiResponse[PaginationResult[Space]]:
    return ok(await app.list_spaces(limit, offset, brand, city_id, building_id, category, is_active, search))


@router.get(
    "/spaces/{space_id}",
    summary="Get space",
    operation_id="getSpace",
    responses={
        200: {"description": "Space details"},
        404: {"model": ErrorResponse, "description": "Space not found"},
    },
)
async def get_space(space_id: str, app: AppDep) -> ApiResponse[Space]:
    return ok(await app.get_space(space_id))


@router.post(
    "/spaces",
    summary="Create space",
    description="Create a space with a new SPC id. Its city is created automatically when unknown.",
    operation_id="createSpace",
    status_code=201,
    responses={201: {"description": "Space created"}, **_WRITE_ERRORS},
)
async def create_space(req: SpaceRequest, app: AppDep, _: AdminDep) -> ApiResponse[Space]:
    return ok(await app.create_space(req.model_dump(exclude_unset=True)))


@router.put(
    "/spaces/{space_id}",
    summary="Replace space",
    operation_id="replaceSpace",
    responses={200: {"description": "Space updated"}, **_WRITE_ERRORS},
)
async def replace_space(space_id: str, req: SpaceRequest, app: AppDep, _: AdminDep) -> ApiResponse[Space]:
    return ok(await app.update_space(space_id, req.model_dump(exclude_unset=True), partial=False))


@router.patch(
    "/spaces/{space_id}",
    summary="Update space",
    description="Partial update, e.g. toggling is_active moves the space between active and inactive counts.",
    operation_id="updateSpace",
    responses={200: {"description": "Space updated"}, **_WRITE_ERRORS},
)
async def update_space(space_id: str, req: SpaceRequest, app: AppDep, _: AdminDep) -> ApiResponse[Space]:
    return ok(await app.update_space(space_id, req.model_dump(exclude_unset=True), partial=True))


@router.delete(
    "/spaces/{space_id}",
    summary="Delete space",
    operation_id="deleteSpace",
    responses={
        200: {"description": "Space deleted"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        404: {"model": ErrorResponse, "description": "Space not found"},
        500: {"model": ErrorResponse, "description": "Deleted, but city statistics could not be updated"},
    },
)
async def delete_space(space_id: str, app: AppDep, _: AdminDep) -> ApiResponse[DeletedResponse]:
    await app.delete_space(space_id)
    return ok(DeletedResponse(id=space_id))
