from workhub.web.routers.buildings import router as buildings_router
from workhub.web.routers.cities import router as cities_router
from workhub.web.routers.dashboard import router as dashboard_router
from workhub.web.routers.metadata import router as metadata_router
from workhub.web.routers.orders import router as orders_router
from workhub.web.routers.services import router as services_router
from workhub.web.routers.spaces import router as spaces_router

__all__ = [
    "buildings_router",
    "cities_router",
    "dashboard_router",
    "metadata_router",
    "orders_router",
    "services_router",
    "spaces_router",
]
