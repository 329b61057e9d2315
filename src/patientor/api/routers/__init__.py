"""API routers."""

from .diagnoses import router as diagnoses_router
from .health import router as health_router
from .patients import router as patients_router

__all__ = [
    "diagnoses_router",
    "health_router",
    "patients_router",
]
