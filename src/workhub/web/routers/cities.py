from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from workhub.core.modules.city.models import City
from workhub.core.pagination import PaginationResult
from workhub.web.deps import AdminDep, AppDep
from workhub.web.openapi import ApiResponse, DeletedResponse, ErrorResponse, ok

router = APIRouter(tags=["cities"])


class BusinessInfoInput(BaseModel):
    currency: str | None = None
    tax_rate: float | None = Field(None, description="VAT as a fraction between 0 and 1")


class CityRequest(BaseModel):
    """City fields. Statistics are maintained by the server and cannot be written."""

    name: str | None = Field(None, description="City name, 2-100 characters")
    province: str | None = Field(None, description="Province name, 2-100 characters")
    country: str | None = None
    timezone: str | None = None
    utc_offset: str | None = None
    postal_codes: list[str] | None = None
    latitude: float | None = None
    longitude: float | None = None
    business_info: BusinessInfoInput | None = None
    thumbnail: str | None = None
    is_active: bool | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Medan", "province": "North Sumatra", "business_info": {"tax_rate": 0.11}}]
        }
    }


@router.get(
    "/cities",
    summary="List cities",
    description="Paginated list of cities, newest first, with their building and space statistics.",
    operation_id="listCities",
    responses={200: {"description": "Paginated cities"}},
)
async def list_cities(
    app: AppDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    is_active: bool | None = None,
    search: str | None = None,
) -> ApiResponse[PaginationResult[City]]:
    return ok(await app.list_cities(limit, offset, is_active, search))


@router.get(
    "/cities/{city_id}",
    summary="Get city",
    operation_id="getCity",
    responses={
        200: {"description": "City details"},
        404: {"model": ErrorResponse, "description": "City not found"},
    },
)
async def get_city(city_id: str, app: AppDep) -> ApiResponse[City]:
    return ok(await app.get_city(city_id))


@router.post(
    "/cities",
    summary="Create city",
    description="Create a city with a new CIT sequence id.",
    operation_id="createCity",
    status_code=201,
    responses={
        201: {"description": "City created"},
        400: {"model": ErrorResponse, "description": "Validation failed"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        409: {"model": ErrorResponse, "description": "City already exists in this province"},
    },
)
async def create_city(req: CityRequest, app: AppDep, _: AdminDep) -> ApiResponse[City]:
    return ok(await app.create_city(req.model_dump(exclude_unset=True)))


@router.put(
    "/cities/{city_id}",
    summary="Replace city",
    operation_id="replaceCity",
    responses={
        200: {"description": "City updated"},
        400: {"model": ErrorResponse, "description": "Validation failed"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        404: {"model": ErrorResponse, "description": "City not found"},
        409: {"model": ErrorResponse, "description": "Another city has this name and province"},
    },
)
async def replace_city(city_id: str, req: CityRequest, app: AppDep, _: AdminDep) -> ApiResponse[City]:
    return ok(await app.update_city(city_id, req.model_dump(exclude_unset=True), partial=False))


@router.patch(
    "/cities/{city_id}",
    summary="Update city",
    description="Partial update: only the given fields change.",
    operation_id="updateCity",
    responses={
        200: {"description": "City updated"},
        400: {"model": ErrorResponse, "description": "Validation failed"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        404: {"model": ErrorResponse, "description": "City not found"},
        409: {"model": ErrorResponse, "description": "Another city has this name and province"},
    },
)
async def update_city(city_id: str, req: CityRequest, app: AppDep, _: AdminDep) -> ApiResponse[City]:
    return ok(await app.update_city(city_id, req.model_dump(exclude_unset=True), partial=True))


@router.delete(
    "/cities/{city_id}",
    summary="Delete city",
    description="Only cities without buildings or spaces can be deleted.",
    operation_id="deleteCity",
    responses={
        200: {"description": "City deleted"},
        401: {"model": ErrorResponse, "description": "Admin token required"},
        404: {"model": ErrorResponse, "description": "City not found"},
        409: {"model": ErrorResponse, "description": "City still has buildings or spaces"},
    },
)
async def delete_city(city_id: str, app: AppDep, _: AdminDep) -> ApiResponse[DeletedResponse]:
    await app.delete_city(city_id)
    return ok(DeletedResponse(id=city_id))
