"""Pydantic models shared across API responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ErrorDetail(BaseModel):
    """Error detail in API responses."""

    model_config = ConfigDict(extra="forbid")

    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str = Field(..., min_length=1, max_length=128)
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    model_config = ConfigDict(extra="forbid")

    error: ErrorDetail


class CamelModel(BaseModel):
    """Request/response body using camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
