"""
CatAPI Backend — Shared Response Schemas
==========================================

What:  Envelopes shared by every resource: the `{message, data}` wrapper for
       mutations, the error body, and the health check body.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class MessageResponse(BaseModel, Generic[DataT]):
    """
    Envelope returned by every mutating operation.

    Reads return the bare record or list instead.
    """
    message: str = Field(description="Human-readable outcome of the operation")
    data: DataT = Field(description="The affected record or its reduced projection")


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "No cat found",
            "request_id": "1f0c2a9b"
        }

    `stack` is only present outside production.
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    stack: Optional[str] = Field(default=None, description="Traceback (non-production only)")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
