"""Diagnosis code endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ..store import PatientJsonStore, get_store

router = APIRouter(prefix="/diagnoses", tags=["diagnoses"])


@router.get("")
async def list_diagnoses(store: PatientJsonStore = Depends(get_store)) -> list[dict[str, Any]]:
    """Return the full diagnosis code table."""
    return [d.to_wire() for d in await store.get_diagnoses()]
