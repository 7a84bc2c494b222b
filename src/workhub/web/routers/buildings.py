from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from workhub.core.modules.building.models import Building
from workhub.core.pagination import PaginationResult
from workhub.web.deps import AdminDep, AppDep
from workhub.web.openapi import ApiResponse, DeletedResponse, ErrorResponse, ok

router = APIRouter(tags=["buildings"])


class LocationInput(BaseModel):
    """Street location; city and province select (or auto-create) the city record."""

    address: str | None = Field(None, description="Street address, at least 5 characters")
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class BuildingRequest(BaseModel):
    """Building fields. Rules are checked by the service, which reports all violations together."""

    name: str | None = None
    description: str | None = None
    brand: str | None = Field(None, description="One of NextSpace, UnionSpace, CoSpace")
    location: LocationInput | None = None
    is_active: bool | None = None
    amenities: list[str] | None = None
    thumbnail: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "NextSpace Medan Tower",
                    "brand": "NextSpace",
                    "location": {"address": "Jl. Gatot Subroto 12", "city": "Medan", "province": "North Sumatra"},
                    "amenities": ["wifi", "parking"],
                }
            ]
        }
    }


_WRITE_ERRORS = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    401: {"model": ErrorResponse, "description": "Admin token required"},
    409: {"model": ErrorResponse, "description": "Building with this name already exists in the city"},
    500: {"model": ErrorResponse, "description": "Saved, but city statistics could not be updated"},
}


@router.get(
    "/buildings",
    summary="List buildings",
    operation_id="listBuildings",
    responses={200: {"description": "Paginated buildings"}},
)
async def list_buildings(
    app: AppDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    brand: str | None = None,
    city_id: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> ApiResponse[PaginationResult[Building]]:
    return ok(await app.list_buildings(limit, offset, brand, city_id, is_active, search))


@router.get(
    "/buildings/{building_id}",
    summary="Get building",
    operation_id="getBuilding",
    responses={
        200: {"description": "Building details"},
        404: {"model": ErrorResponse, "description": "Building not found"},
    },
)
async def get_building(building_id: str, app: AppDep) -> ApiResponse[Building]:
    return ok(await app.get_building(building_id))


@router.post(
    "/buildings",
    summary="Create building",
    description="Create a building with a new BLD id. Its city is created automatically when unknown.",
    operation_id="createBuilding",
    status_code=201,
    responses={201: {"description": "Building created"}, **_WRITE_ERRORS},
)
async def create_building(req: BuildingRequest, app: AppDep, _: AdminDep) -> ApiResponse[Building]:
    return ok(await app.create_building(req.model_dump(exclude_unset=True)))


@router.put(
    "/buildings/{building_id}",
    summary="Replace building",
    operation_id="replaceBuilding",
    responses={
        200: {"description": "Building updated"},
        404: {"model": ErrorResponse, "description": "Building not found"},
        **_WRITE_ERRORS,
    },
)
async def replace_building(building_id: str, req: BuildingRequest, app: AppDep, _: AdminDep) -> ApiResponse[Building]:
    return ok(await app.update_building(building_id, req.model_dump(exclude_unset=True), partial=False))


@router.patch(
    "/buildings/{building_id}",
    summary="Update building",
    description="Partial update. Changing location.city moves the building to another city's statistics.",
    operation_id="updateBuilding",
    responses={
        200: {"description": "Building updated"},
        404: {"model": ErrorResponse, "description": "Building not found"},
        **_WRITE_ERRORS,
    },
)
async def update_building(building_id: str, req: BuildingRequest, app: AppDep, _: AdminDep) -> ApiResponse[Building]:
    return ok(await app.update_building(building_id, req.model_dump(exclude_unset=True), partial=True))


@router.delete(
    "/buildings/{building_id}",
    summary="Delete building",
    description="Delete the building and remove it from its city's statistics. The city itself is kept.",
    operation_id="deleteBuilding",
    responses={
        200: {"description": "Building deleted"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        404: {"model": ErrorResponse, "description": "Building not found"},
        500: {"model": ErrorResponse, "description": "Deleted, but city statistics could not be updated"},
    },
)
async def delete_building(building_id: str, app: AppDep, _: AdminDep) -> ApiResponse[DeletedResponse]:
    await app.delete_building(building_id)
    return ok(DeletedResponse(id=building_id))
