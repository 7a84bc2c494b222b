from workhub.core.core import Service
from workhub.core.modules.dashboard.models import DashboardStats
from workhub.core.modules.validation.models import OrderStatus


class DashboardService(Service):
    """Read-only aggregate numbers across collections."""

    async def get_stats(self) -> DashboardStats:
        services = self.core.services
        orders_by_status = await services.order.count_by_status()
        total_orders = sum(orders_by_status.values())
        completed = orders_by_status[OrderStatus.COMPLETED]
        revenue = await services.order.completed_revenue()

        return DashboardStats(
            total_cities=await services.city.count(),
            total_buildings=await services.building.count(),
            active_buildings=await services.building.count({"is_active": True}),
            total_spaces=await services.space.count(),
            active_spaces=await services.space.count({"is_active": True}),
            total_services=await services.offering.count(),
            total_orders=total_orders,
            orders_by_status=orders_by_status,
            total_revenue=revenue,
            completion_rate=round(completed / total_orders * 100) if total_orders else 0,
            average_order_value=round(revenue / completed) if completed else 0,
        )
