"""API response schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    patients: int = 0
    version: str = "0.1.0"
