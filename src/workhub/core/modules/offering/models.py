"""Services sold to customers (meeting rooms, workspaces, events), exposed as /services."""

from pydantic import BaseModel, Field

from workhub.core.db import MongoModel
from workhub.core.modules.validation.models import ServiceStatus


class OfferingDescription(BaseModel):
    short: str = ""
    long: str = ""


class Offering(MongoModel):
    """Service catalogue entry. Spaces refer to it by name through Space.category."""

    name: str
    slug: str  # URL-friendly unique ID, derived from the name when not given
    category: str = "general"
    type: str = "standard"
    description: OfferingDescription = Field(default_factory=OfferingDescription)
    status: ServiceStatus = ServiceStatus.DRAFT
    created_by: str = "system"
    search_keywords: list[str] = Field(default_factory=list)
