"""Metadata endpoints for exposing system information."""

from fastapi import APIRouter

from workhub.core.modules.validation.models import Brand, OrderStatus, ServiceStatus
from workhub.web.deps import AppDep
from workhub.web.openapi import ApiResponse, ok

router = APIRouter(tags=["metadata"])


@router.get(
    "/metadata/brands",
    summary="List brands",
    description="The brands accepted for buildings and spaces.",
    operation_id="getBrands",
    responses={200: {"description": "Brand names"}},
)
async def get_brands() -> ApiResponse[list[str]]:
    return ok([brand.value for brand in Brand])


@router.get(
    "/metadata/statuses",
    summary="List statuses",
    description="Allowed status values for services and orders.",
    operation_id="getStatuses",
    responses={200: {"description": "Status values per entity"}},
)
async def get_statuses() -> ApiResponse[dict[str, list[str]]]:
    return ok(
        {
            "service": [status.value for status in ServiceStatus],
            "order": [status.value for status in OrderStatus],
        }
    )


@router.get(
    "/metadata/version",
    summary="Get version information",
    description="Returns build and version information including package version, git commit hash and build time.",
    operation_id="getVersion",
    responses={200: {"description": "Version and build information"}},
)
async def get_version(app: AppDep) -> ApiResponse[dict[str, str]]:
    """Get version information."""
    return ok(app.get_version())
