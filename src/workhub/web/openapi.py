from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from workhub.errors import FieldError


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="WorkHub API",
            version="0.1.0",
            summary="Coworking inventory: cities, buildings, spaces, services and orders",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Admin token, required for write operations when configured",
            },
        }

        # Only writes are protected
        for path_item in openapi_schema["paths"].values():
            for method, operation in path_item.items():
                if method.upper() in {"POST", "PUT", "PATCH", "DELETE"}:
                    operation["security"] = [{"BearerAuth": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorBody(BaseModel):
    """Error part of the response envelope."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    fields: list[FieldError] | None = Field(default=None, description="Per-field problems for validation errors")


class ApiResponse[T](BaseModel):
    """Envelope wrapping every API response."""

    success: bool = True
    data: T | None = None
    error: ErrorBody | None = None


def ok[T](data: T) -> ApiResponse[T]:
    return ApiResponse(success=True, data=data)


class ErrorResponse(BaseModel):
    """Envelope returned on failure."""

    success: bool = False
    data: None = None
    error: ErrorBody

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": False, "data": None, "error": {"code": "not_found", "message": "Space 'SPC25001' not found"}},
                {
                    "success": False,
                    "data": None,
                    "error": {
                        "code": "validation_error",
                        "message": "Validation failed: capacity: capacity must be between 1 and 1000, got 2000",
                        "fields": [{"field": "capacity", "message": "capacity must be between 1 and 1000, got 2000"}],
                    },
                },
            ]
        }
    }


class DeletedResponse(BaseModel):
    """Confirmation payload for delete operations."""

    id: str = Field(..., description="Id of the deleted document")
    deleted: bool = True
