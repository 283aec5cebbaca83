"""RFC 7807 Problem Details schemas for error responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

_DEFAULT_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


class ProblemDetail(BaseModel):
    """RFC 7807 problem details body.

    Example:
        {
            "type": "invalid-cursor",
            "title": "Bad Request",
            "status": 400,
            "detail": "invalid after cursor",
            "instance": "http://testserver/api/v1/streams/s1/events?after=x"
        }
    """

    type: str = Field(default="about:blank", description="Problem type identifier")
    title: str = Field(description="Short summary of the problem type")
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(default=None, description="Explanation of this occurrence")
    instance: str | None = Field(default=None, description="URI of this occurrence")

    @staticmethod
    def default_title(status_code: int) -> str:
        return _DEFAULT_TITLES.get(status_code, "Error")


class ValidationError(BaseModel):
    """One field-level validation failure."""

    field: str
    message: str
    type: str
    value: Any = None


class ValidationProblemDetail(ProblemDetail):
    """Problem details carrying field-level validation errors."""

    errors: list[ValidationError] = Field(default_factory=list)
