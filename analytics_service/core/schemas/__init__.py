"""Shared API schemas."""

from .error import ProblemDetail, ValidationError, ValidationProblemDetail

__all__ = ["ProblemDetail", "ValidationError", "ValidationProblemDetail"]
