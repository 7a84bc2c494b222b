"""Tests for orders."""

import pytest

from workhub.core.modules.validation.models import OrderStatus
from workhub.errors import NotFoundError, ValidationError


@pytest.fixture
async def space(core, space_payload):
    return await core.services.space.create(space_payload)


def order_payload(space_id, **overrides):
    return {
        "customer_name": "Budi Santoso",
        "customer_email": "budi@example.com",
        "space_id": space_id,
        "amount": 250000,
        "duration": 2,
        **overrides,
    }


class TestOrderService:
    async def test_create_denormalizes_space_name(self, core, space):
        order = await core.services.order.create_order(order_payload(space.id))
        assert order.id.startswith("ORD")
        assert len(order.id) == 9
        assert order.space_name == "Meeting Room A"
        assert order.status == OrderStatus.PENDING

    async def test_unknown_space(self, core):
        with pytest.raises(NotFoundError, match="SPC25999"):
            await core.services.order.create_order(order_payload("SPC25999"))

    async def test_invalid_email(self, core, space):
        with pytest.raises(ValidationError, match="customer_email"):
            await core.services.order.create_order(order_payload(space.id, customer_email="budi"))

    async def test_status_change(self, core, space):
        order = await core.services.order.create_order(order_payload(space.id))
        updated = await core.services.order.update_order(order.id, {"status": "completed"}, partial=True)
        assert updated.status == OrderStatus.COMPLETED
        assert updated.amount == 250000

    async def test_moving_order_refreshes_space_name(self, core, space, space_payload):
        other = await core.services.space.create({**space_payload, "name": "Board Room"})
        order = await core.services.order.create_order(order_payload(space.id))
        updated = await core.services.order.update_order(order.id, {"space_id": other.id}, partial=True)
        assert updated.space_name == "Board Room"

    async def test_list_and_search(self, core, space):
        await core.services.order.create_order(order_payload(space.id))
        await core.services.order.create_order(order_payload(space.id, customer_name="Siti Rahma", status="cancelled"))
        assert (await core.services.order.list_orders(status=OrderStatus.CANCELLED)).total == 1
        assert (await core.services.order.list_orders(space_id=space.id)).total == 2
        result = await core.services.order.list_orders(search="siti")
        assert [o.customer_name for o in result.items] == ["Siti Rahma"]

    async def test_revenue_counts_completed_only(self, core, space):
        await core.services.order.create_order(order_payload(space.id, amount=100, status="completed"))
        await core.services.order.create_order(order_payload(space.id, amount=300, status="completed"))
        await core.services.order.create_order(order_payload(space.id, amount=999))
        assert await core.services.order.completed_revenue() == 400
        counts = await core.services.order.count_by_status()
        assert counts[OrderStatus.COMPLETED] == 2
        assert counts[OrderStatus.PENDING] == 1

    async def test_delete(self, core, space):
        order = await core.services.order.create_order(order_payload(space.id))
        await core.services.order.delete_order(order.id)
        with pytest.raises(NotFoundError):
            await core.services.order.get_order(order.id)
