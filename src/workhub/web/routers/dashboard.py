from fastapi import APIRouter

from workhub.core.modules.dashboard.models import DashboardStats
from workhub.web.deps import AppDep
from workhub.web.openapi import ApiResponse, ok

router = APIRouter(tags=["dashboard"])


@router.get(
    "/dashboard/stats",
    summary="Dashboard statistics",
    description="Totals across cities, buildings, spaces, services and orders, with revenue of completed orders.",
    operation_id="getDashboardStats",
    responses={200: {"description": "Aggregated statistics"}},
)
async def get_dashboard_stats(app: AppDep) -> ApiResponse[DashboardStats]:
    return ok(await app.get_dashboard_stats())
