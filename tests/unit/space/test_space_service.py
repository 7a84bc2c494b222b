"""Tests for spaces."""

import pytest

from workhub.core.modules.space.models import default_operating_hours
from workhub.core.modules.statistics.models import CityStatistics
from workhub.errors import NotFoundError, ValidationError


class TestSpaceService:
    async def test_create_with_defaults(self, core, space_payload):
        space = await core.services.space.create(space_payload)
        assert space.id.startswith("SPC")
        assert space.capacity == 12
        assert space.operating_hours == default_operating_hours()
        assert space.operating_hours["sunday"] == "Closed"
        stats = await core.services.statistics.get_statistics(space.city_id)
        assert stats == CityStatistics(total_spaces=1, active_spaces=1)

    async def test_capacity_and_brand_errors_together(self, core, space_payload):
        with pytest.raises(ValidationError) as exc_info:
            await core.services.space.create({**space_payload, "capacity": 2000, "brand": "Acme"})
        assert sorted(e.field for e in exc_info.value.field_errors) == ["brand", "capacity"]
        assert await core.services.space.count() == 0

    async def test_unknown_building_rejected(self, core, space_payload):
        with pytest.raises(NotFoundError, match="BLD25999"):
            await core.services.space.create({**space_payload, "building_id": "BLD25999"})
        assert await core.services.space.count() == 0

    async def test_space_in_building(self, core, space_payload, building_payload):
        building = await core.services.building.create(building_payload)
        space = await core.services.space.create({**space_payload, "building_id": building.id})
        assert space.building_id == building.id
        assert space.city_id == building.city_id
        stats = await core.services.statistics.get_statistics(space.city_id)
        assert stats == CityStatistics(total_buildings=1, active_buildings=1, total_spaces=1, active_spaces=1)

        result = await core.services.space.list_entities(building_id=building.id)
        assert [s.id for s in result.items] == [space.id]

    async def test_patch_capacity_revalidates(self, core, space_payload):
        space = await core.services.space.create(space_payload)
        with pytest.raises(ValidationError, match="capacity"):
            await core.services.space.update(space.id, {"capacity": 0}, partial=True)
        updated = await core.services.space.update(space.id, {"capacity": 40}, partial=True)
        assert updated.capacity == 40
        assert updated.name == "Meeting Room A"

    async def test_deactivate_then_delete(self, core, space_payload):
        space = await core.services.space.create(space_payload)
        await core.services.space.update(space.id, {"is_active": False}, partial=True)
        await core.services.space.delete(space.id)
        assert await core.services.statistics.get_statistics(space.city_id) == CityStatistics()

    async def test_list_filters(self, core, space_payload):
        await core.services.space.create(space_payload)
        await core.services.space.create({**space_payload, "name": "Hot Desk", "category": "Workspace", "brand": "CoSpace"})

        assert (await core.services.space.list_entities(category="Workspace")).total == 1
        assert (await core.services.space.list_entities(brand="NextSpace")).total == 1
        assert (await core.services.space.list_entities(is_active=True)).total == 2
        page = await core.services.space.list_entities(limit=1, offset=1)
        assert [s.name for s in page.items] == ["Meeting Room A"]
        assert page.has_more is False
