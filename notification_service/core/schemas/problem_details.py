"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Error bodies additionally carry ``success: false`` and ``error`` so that
    callers written against the plain ``{success, error}`` shape keep working.

    See: https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="URI reference identifying the specific occurrence",
    )
    success: bool = Field(default=False, description="Always false for error responses")
    error: str | None = Field(default=None, description="Same text as detail")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "input-error",
                "title": "Bad Request",
                "status": 400,
                "detail": "At least one phone number is required",
                "success": False,
                "error": "At least one phone number is required",
            }
        },
    )


class ValidationErrorItem(BaseModel):
    """Single field-level validation failure."""

    field: str
    message: str
    type: str


class ValidationProblemDetails(ProblemDetails):
    """Problem details with field-level validation errors."""

    errors: list[ValidationErrorItem] = Field(default_factory=list)
