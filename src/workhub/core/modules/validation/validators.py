"""Entity payload validators using ABC pattern.

Validation is pure: it reads a plain payload dict (API field names, nested
objects as dicts) and reports every violated rule instead of stopping at the
first one.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from workhub import utils
from workhub.core.modules.counter.models import EntityType, parse_sequence_id
from workhub.core.modules.validation.models import (
    ADDRESS_MIN_LENGTH,
    CAPACITY_RANGE,
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    NAME_LENGTH,
    REGION_LENGTH,
    TAX_RATE_RANGE,
    Brand,
    OrderStatus,
    ServiceStatus,
)
from workhub.errors import FieldError, ValidationError

_MISSING = object()


def get_path(payload: dict[str, Any], path: str) -> Any:
    """Resolve a dotted path in nested dicts, returning _MISSING when any step is absent."""
    value: Any = payload
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _is_blank(value: Any) -> bool:
    return value is _MISSING or value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


class Checks:
    """Collects FieldErrors for one payload."""

    def __init__(self, payload: dict[str, Any]) -> None:
        self.payload = payload
        self.errors: list[FieldError] = []

    def fail(self, field: str, message: str) -> None:
        self.errors.append(FieldError(field=field, message=message))

    def required_string(self, path: str, length: tuple[int, int | None] = (1, None)) -> None:
        value = get_path(self.payload, path)
        if _is_blank(value):
            self.fail(path, f"{path} is required")
            return
        self.string(path, length)

    def string(self, path: str, length: tuple[int, int | None] = (1, None)) -> None:
        """Check type and length of an optional string."""
        value = get_path(self.payload, path)
        if value is _MISSING or value is None:
            return
        if not isinstance(value, str):
            self.fail(path, f"{path} must be a string")
            return
        min_length, max_length = length
        size = len(value.strip())
        if size < min_length or (max_length is not None and size > max_length):
            bounds = f"between {min_length} and {max_length}" if max_length is not None else f"at least {min_length}"
            self.fail(path, f"{path} must be {bounds} characters")

    def number_range(
        self, path: str, bounds: tuple[float, float | None], required: bool = False, integer: bool = False
    ) -> None:
        value = get_path(self.payload, path)
        if value is _MISSING or value is None:
            if required:
                self.fail(path, f"{path} is required")
            return
        if not _is_number(value) or (integer and not isinstance(value, int)):
            self.fail(path, f"{path} must be {'an integer' if integer else 'a number'}")
            return
        low, high = bounds
        if high is None:
            if value < low:
                self.fail(path, f"{path} must be at least {_fmt(low)}, got {_fmt(value)}")
        elif not low <= value <= high:
            self.fail(path, f"{path} must be between {_fmt(low)} and {_fmt(high)}, got {_fmt(value)}")

    def one_of(self, path: str, allowed: type[StrEnum], required: bool = False) -> None:
        value = get_path(self.payload, path)
        if _is_blank(value):
            if required:
                self.fail(path, f"{path} is required")
            return
        values = [member.value for member in allowed]
        if value not in values:
            self.fail(path, f"{path} must be one of: {', '.join(values)}")

    def email(self, path: str) -> None:
        value = get_path(self.payload, path)
        if isinstance(value, str) and value.strip() and not utils.is_email(value.strip()):
            self.fail(path, f"{path} must be a valid email address")

    def slug(self, path: str) -> None:
        value = get_path(self.payload, path)
        if isinstance(value, str) and value and not utils.is_slug(value):
            self.fail(path, f"{path} must contain only lowercase letters, numbers and single hyphens")

    def sequence_id(self, path: str, entity_type: EntityType) -> None:
        """Check that a reference looks like an id of the given type, e.g. BLD25001."""
        value = get_path(self.payload, path)
        if not isinstance(value, str) or not value.strip():
            return
        try:
            parsed = parse_sequence_id(value.strip())
        except ValidationError:
            parsed = None
        if parsed is None or parsed.entity_type != entity_type:
            self.fail(path, f"{path} must be a {entity_type} id like {entity_type.prefix}25001")

    def coordinates(self, prefix: str = "") -> None:
        self.number_range(f"{prefix}latitude", LATITUDE_RANGE)
        self.number_range(f"{prefix}longitude", LONGITUDE_RANGE)


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class EntityValidator(ABC):
    """Abstract base class for entity payload validators."""

    def validate(self, payload: dict[str, Any]) -> list[FieldError]:
        """Check a complete payload and return one FieldError per violated rule."""
        checks = Checks(payload)
        self._check(checks)
        return checks.errors

    @abstractmethod
    def _check(self, checks: Checks) -> None:
        """Register type-specific rule violations on checks."""


class LocatedEntityValidator(EntityValidator):
    """Rules shared by buildings and spaces: name, brand and a full street location."""

    def _check(self, checks: Checks) -> None:
        checks.required_string("name", NAME_LENGTH)
        checks.string("description", (0, 1000))
        checks.one_of("brand", Brand, required=True)
        if not isinstance(get_path(checks.payload, "location"), dict):
            checks.fail("location", "location is required")
            return
        checks.required_string("location.address", (ADDRESS_MIN_LENGTH, None))
        checks.required_string("location.city", REGION_LENGTH)
        checks.required_string("location.province", REGION_LENGTH)
        checks.string("location.country", (2, None))
        checks.coordinates("location.")


class BuildingValidator(LocatedEntityValidator):
    pass


class SpaceValidator(LocatedEntityValidator):
    def _check(self, checks: Checks) -> None:
        super()._check(checks)
        checks.number_range("capacity", CAPACITY_RANGE, required=True, integer=True)
        checks.sequence_id("building_id", EntityType.BUILDING)


class CityValidator(EntityValidator):
    def _check(self, checks: Checks) -> None:
        checks.required_string("name", REGION_LENGTH)
        checks.required_string("province", REGION_LENGTH)
        checks.string("country", (2, None))
        checks.coordinates()
        checks.number_range("business_info.tax_rate", TAX_RATE_RANGE)


class ServiceValidator(EntityValidator):
    def _check(self, checks: Checks) -> None:
        checks.required_string("name", NAME_LENGTH)
        checks.slug("slug")
        checks.one_of("status", ServiceStatus)


class OrderValidator(EntityValidator):
    def _check(self, checks: Checks) -> None:
        checks.required_string("customer_name", NAME_LENGTH)
        checks.required_string("customer_email")
        checks.email("customer_email")
        checks.required_string("space_id")
        checks.sequence_id("space_id", EntityType.SPACE)
        checks.number_range("amount", (0, None), required=True)
        checks.number_range("duration", (1, None), integer=True)
        checks.one_of("status", OrderStatus)


VALIDATORS: dict[EntityType, EntityValidator] = {
    EntityType.CITY: CityValidator(),
    EntityType.BUILDING: BuildingValidator(),
    EntityType.SPACE: SpaceValidator(),
    EntityType.SERVICE: ServiceValidator(),
    EntityType.ORDER: OrderValidator(),
}


def validate(entity_type: EntityType | str, payload: dict[str, Any]) -> list[FieldError]:
    """Validate a payload for an entity type. Empty list means valid."""
    return VALIDATORS[EntityType(entity_type)].validate(payload)


def ensure_valid(entity_type: EntityType | str, payload: dict[str, Any]) -> None:
    """Raise ValidationError carrying every FieldError when the payload is invalid."""
    errors = validate(entity_type, payload)
    if errors:
        raise ValidationError.from_field_errors(errors)


def merge_payload(base: dict[str, Any], patch: dict[str, Any], nested: Iterable[str] = ()) -> dict[str, Any]:
    """Overlay a partial update on an existing payload; keys in nested are merged one level deep."""
    merged = {**base, **patch}
    for key in nested:
        if isinstance(base.get(key), dict) and isinstance(patch.get(key), dict):
            merged[key] = {**base[key], **patch[key]}
    return merged
