"""Pydantic models used by the stylist router."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Generic error payload."""

    detail: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
