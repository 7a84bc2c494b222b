from pydantic import Field

from workhub.core.db import MongoModel
from workhub.core.modules.validation.models import OrderStatus


class Order(MongoModel):
    """Booking of a space by a customer."""

    customer_name: str
    customer_email: str
    space_id: str
    space_name: str = ""  # Denormalized from the space at write time
    amount: float = Field(..., ge=0)
    duration: int = Field(1, ge=1)
    status: OrderStatus = OrderStatus.PENDING
    search_keywords: list[str] = Field(default_factory=list)
