"""Cities and the locations that place buildings and spaces in them."""

from pydantic import BaseModel, Field

from workhub.core.db import MongoModel
from workhub.core.modules.statistics.models import CityStatistics
from workhub.utils import normalize_key

DEFAULT_COUNTRY = "Indonesia"
DEFAULT_TIMEZONE = "Asia/Jakarta"
DEFAULT_UTC_OFFSET = "+07:00"
AUTO_CREATED_BY = "auto-create"


class Location(BaseModel):
    """Street address of a building or space; city and province resolve the City record."""

    address: str
    city: str
    province: str
    postal_code: str = ""
    country: str | None = None  # Config default_country when unset
    latitude: float | None = None
    longitude: float | None = None


class BusinessInfo(BaseModel):
    currency: str = "IDR"
    tax_rate: float = Field(0.11, description="VAT as a fraction, 0..1")


class City(MongoModel):
    """City with denormalized counts of the buildings and spaces located in it."""

    name: str
    province: str
    country: str = DEFAULT_COUNTRY
    timezone: str = DEFAULT_TIMEZONE
    utc_offset: str = DEFAULT_UTC_OFFSET
    postal_codes: list[str] = Field(default_factory=list)
    latitude: float | None = None
    longitude: float | None = None
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    statistics: CityStatistics = Field(default_factory=CityStatistics)  # Written only by StatisticsService
    thumbnail: str | None = None
    is_active: bool = True
    created_by: str = "system"
    search_keywords: list[str] = Field(default_factory=list)
    lookup_key: str = ""  # normalized "name|province", unique


def city_lookup_key(name: str, province: str) -> str:
    return f"{normalize_key(name)}|{normalize_key(province)}"
