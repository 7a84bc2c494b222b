from pydantic import BaseModel, Field

from workhub.core.modules.validation.models import OrderStatus


class DashboardStats(BaseModel):
    """Headline numbers for the admin dashboard."""

    total_cities: int
    total_buildings: int
    active_buildings: int
    total_spaces: int
    active_spaces: int
    total_services: int
    total_orders: int
    orders_by_status: dict[OrderStatus, int]
    total_revenue: float = Field(..., description="Sum of completed order amounts")
    completion_rate: int = Field(..., description="Completed orders as a rounded percentage of all orders")
    average_order_value: int = Field(..., description="Revenue per completed order, rounded")
