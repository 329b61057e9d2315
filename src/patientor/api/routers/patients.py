"""Patient and entry endpoints.

Mirrors the patientor REST API: patient list, single patient, patient
creation and entry creation.  Rejected payloads get a 400 whose ``detail``
is a plain message the frontend can show as-is.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import TypeAdapter, ValidationError

from ...models import NewEntry, NewPatient
from ..store import PatientJsonStore, ResourceNotFoundError, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["patients"])

_NEW_ENTRY_ADAPTER: TypeAdapter[NewEntry] = TypeAdapter(NewEntry)


def _validation_message(e: ValidationError) -> str:
    """Collapse pydantic errors into one line: ``field: problem; ...``."""
    parts = []
    for error in e.errors():
        loc = ".".join(str(p) for p in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "Incorrect or missing data: " + "; ".join(parts)


@router.get("")
async def list_patients(store: PatientJsonStore = Depends(get_store)) -> list[dict[str, Any]]:
    """List all patients without SSN or entries."""
    return [p.summary().to_wire() for p in await store.list_patients()]


@router.post("", status_code=201)
async def create_patient(
    body: dict[str, Any] = Body(...),
    store: PatientJsonStore = Depends(get_store),
) -> dict[str, Any]:
    """Create a new patient with an empty record."""
    try:
        new_patient = NewPatient.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e))

    patient = await store.add_patient(new_patient)
    return patient.to_wire()


@router.get("/{patient_id}")
async def get_patient(
    patient_id: str,
    store: PatientJsonStore = Depends(get_store),
) -> dict[str, Any]:
    """Get one patient with every entry."""
    try:
        patient = await store.get_patient(patient_id)
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return patient.to_wire()


@router.post("/{patient_id}/entries", status_code=201)
async def add_entry(
    patient_id: str,
    body: dict[str, Any] = Body(...),
    store: PatientJsonStore = Depends(get_store),
) -> dict[str, Any]:
    """Append a new entry to a patient's record.

    The body is an entry-creation payload (``kind`` plus the shared and
    kind-specific fields).  Returns the stored entry with its new id.
    """
    try:
        payload = _NEW_ENTRY_ADAPTER.validate_python(body)
    except ValidationError as e:
        message = _validation_message(e)
        logger.info(f"[PATIENTS] Rejected entry for {patient_id}: {message}")
        raise HTTPException(status_code=400, detail=message)

    try:
        entry = await store.add_entry(patient_id, payload)
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return entry.to_wire()
