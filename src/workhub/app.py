import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import Any

from pymongo.asynchronous.database import AsyncDatabase

from workhub.config import Config
from workhub.core.core import Core
from workhub.core.modules.building.models import Building
from workhub.core.modules.city.models import City
from workhub.core.modules.dashboard.models import DashboardStats
from workhub.core.modules.offering.models import Offering
from workhub.core.modules.order.models import Order
from workhub.core.modules.space.models import Space
from workhub.core.modules.validation.models import OrderStatus
from workhub.core.pagination import PaginationResult


class App:
    """Facade for all application operations used by the web layer.

    Write access is checked by the web layer through is_admin_token_valid
    before any mutating method is called.
    """

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    def is_admin_token_valid(self, token: str | None) -> bool:
        """Check a bearer token against the configured admin token. Open access when none is configured."""
        expected = self._core.config.admin_token
        if not expected:
            return True
        return token is not None and secrets.compare_digest(token, expected)

    # === Cities ===
    async def list_cities(
        self, limit: int, offset: int, is_active: bool | None = None, search: str | None = None
    ) -> PaginationResult[City]:
        return await self._core.services.city.list_cities(limit, offset, is_active, search)

    async def get_city(self, city_id: str) -> City:
        return await self._core.services.city.get_city(city_id)

    async def create_city(self, payload: dict[str, Any]) -> City:
        return await self._core.services.city.create_city(payload)

    async def update_city(self, city_id: str, payload: dict[str, Any], partial: bool) -> City:
        return await self._core.services.city.update_city(city_id, payload, partial)

    async def delete_city(self, city_id: str) -> None:
        await self._core.services.city.delete_city(city_id)

    # === Buildings ===
    async def list_buildings(
        self,
        limit: int,
        offset: int,
        brand: str | None = None,
        city_id: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> PaginationResult[Building]:
        return await self._core.services.building.list_entities(
            limit, offset, search, brand=brand, city_id=city_id, is_active=is_active
        )

    async def get_building(self, building_id: str) -> Building:
        return await self._core.services.building.get(building_id)

    async def create_building(self, payload: dict[str, Any]) -> Building:
        return await self._core.services.building.create(payload)

    async def update_building(self, building_id: str, payload: dict[str, Any], partial: bool) -> Building:
        return await self._core.services.building.update(building_id, payload, partial)

    async def delete_building(self, building_id: str) -> None:
        await self._core.services.building.delete(building_id)

    # === Spaces ===
    async def list_spaces(
        self,
        limit: int,
        offset: int,
        brand: str | None = None,
        city_id: str | None = None,
        building_id: str | None = None,
        category: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> PaginationResult[Space]:
        return await self._core.services.space.list_entities(
            limit,
            offset,
            search,
            brand=brand,
            city_id=city_id,
            building_id=building_id,
            category=category,
            is_active=is_active,
        )

    async def get_space(self, space_id: str) -> Space:
        return await self._core.services.space.get(space_id)

    async def create_space(self, payload: dict[str, Any]) -> Space:
        return await self._core.services.space.create(payload)

    async def update_space(self, space_id: str, payload: dict[str, Any], partial: bool) -> Space:
        return await self._core.services.space.update(space_id, payload, partial)

    async def delete_space(self, space_id: str) -> None:
        await self._core.services.space.delete(space_id)

    # === Services (catalogue) ===
    async def list_services(
        self,
        limit: int,
        offset: int,
        status: str | None = None,
        category: str | None = None,
        search: str | None = None,
    ) -> PaginationResult[Offering]:
        return await self._core.services.offering.list_offerings(limit, offset, status, category, search)

    async def get_service(self, service_id: str) -> Offering:
        return await self._core.services.offering.get_offering(service_id)

    async def create_service(self, payload: dict[str, Any]) -> Offering:
        return await self._core.services.offering.create_offering(payload)

    async def update_service(self, service_id: str, payload: dict[str, Any], partial: bool) -> Offering:
        return await self._core.services.offering.update_offering(service_id, payload, partial)

    async def delete_service(self, service_id: str) -> None:
        await self._core.services.offering.delete_offering(service_id)

    # === Orders ===
    async def list_orders(
        self,
        limit: int,
        offset: int,
        status: OrderStatus | None = None,
        space_id: str | None = None,
        search: str | None = None,
    ) -> PaginationResult[Order]:
        return await self._core.services.order.list_orders(limit, offset, status, space_id, search)

    async def get_order(self, order_id: str) -> Order:
        return await self._core.services.order.get_order(order_id)

    async def create_order(self, payload: dict[str, Any]) -> Order:
        return await self._core.services.order.create_order(payload)

    async def update_order(self, order_id: str, payload: dict[str, Any], partial: bool) -> Order:
        return await self._core.services.order.update_order(order_id, payload, partial)

    async def delete_order(self, order_id: str) -> None:
        await self._core.services.order.delete_order(order_id)

    # === Dashboard & metadata ===
    async def get_dashboard_stats(self) -> DashboardStats:
        return await self._core.services.dashboard.get_stats()

    def get_version(self) -> dict[str, str]:
        """Package version plus build metadata."""
        try:
            package_version = version("workhub")
        except PackageNotFoundError:
            package_version = "unknown"
        return {
            "version": package_version,
            "git_commit_hash": self._core.config.git_commit_hash,
            "build_time": self._core.config.build_time,
        }
