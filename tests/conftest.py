"""Shared pytest fixtures."""

from collections.abc import AsyncIterator, Iterator
from typing import Any

import pytest
from fakes import FakeDatabase
from fastapi.testclient import TestClient

from workhub.app import App
from workhub.config import Config
from workhub.core.core import Core
from workhub.web.server import create_fastapi_app


@pytest.fixture
def config() -> Config:
    """Config for tests; the database URL is never connected to."""
    return Config(
        database_url="mongodb://localhost:27017/workhub_test",
        host="127.0.0.1",
        port=8000,
        debug=True,
        counter_retry_attempts=3,
    )


@pytest.fixture
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
async def core(config: Config, database: FakeDatabase) -> AsyncIterator[Core]:
    """Started Core over the in-memory database."""
    core = Core(config, database)  # type: ignore[arg-type]
    async with core.lifespan():
        yield core


@pytest.fixture
def client(config: Config, database: FakeDatabase) -> Iterator[TestClient]:
    """HTTP client for the full FastAPI app, with lifespan run."""
    app = App(config, database)  # type: ignore[arg-type]
    with TestClient(create_fastapi_app(app, config), raise_server_exceptions=False) as test_client:
        yield test_client


def location(city: str = "Medan", province: str = "North Sumatra", address: str = "Jl. Gatot Subroto 12") -> dict[str, Any]:
    return {"address": address, "city": city, "province": province}


@pytest.fixture
def building_payload() -> dict[str, Any]:
    return {
        "name": "NextSpace Medan Tower",
        "description": "Flagship building",
        "brand": "NextSpace",
        "location": location(),
        "amenities": ["wifi", "parking"],
    }


@pytest.fixture
def space_payload() -> dict[str, Any]:
    return {
        "name": "Meeting Room A",
        "brand": "NextSpace",
        "category": "Meeting Room",
        "capacity": 12,
        "location": location(),
    }
