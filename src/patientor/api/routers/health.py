"""Health check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..models import HealthResponse
from ..store import PatientJsonStore, get_store

router = APIRouter(tags=["health"])


@router.get("/ping", response_class=PlainTextResponse)
async def ping() -> str:
    """Liveness probe."""
    return "pong"


@router.get("/health", response_model=HealthResponse)
async def health_check(store: PatientJsonStore = Depends(get_store)) -> HealthResponse:
    """Check API health status."""
    patients = await store.list_patients()
    return HealthResponse(status="ok", patients=len(patients))
