"""Local JSON-file patient store.

Backs the reference API with plain files:

    {data_dir}/patients/{id}.json   one file per patient, entries included
    {data_dir}/diagnoses.json       the diagnosis code table

Entries are append-only; the store never edits or removes an existing entry.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import uuid
from pathlib import Path

from pydantic import TypeAdapter

from ..models import Diagnosis, Entry, NewEntry, NewPatient, Patient, with_id

logger = logging.getLogger(__name__)

_DIAGNOSIS_LIST_ADAPTER = TypeAdapter(list[Diagnosis])


class ResourceNotFoundError(Exception):
    """Raised when a requested patient does not exist on disk."""


class PatientJsonStore:
    """Patient store backed by JSON files on disk.

    When ``data_dir`` is ``None`` the store is purely in-memory, which is
    what the tests use.
    """

    def __init__(self, data_dir: str | Path | None = None):
        self._data_dir = Path(data_dir) if data_dir is not None else None
        self._patients: dict[str, Patient] = {}
        self._diagnoses: list[Diagnosis] = []
        self._lock = asyncio.Lock()

        if self._data_dir is not None:
            (self._data_dir / "patients").mkdir(parents=True, exist_ok=True)
            self._load_all()

    @property
    def data_dir(self) -> Path | None:
        return self._data_dir

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _load_all(self) -> None:
        """Load every patient file and the diagnosis table into memory."""
        assert self._data_dir is not None
        count = 0
        for path in sorted((self._data_dir / "patients").glob("*.json")):
            try:
                patient = Patient.model_validate_json(path.read_text(encoding="utf-8"))
            except ValueError:
                logger.warning("[STORE] Failed to load patient file %s, skipping", path)
                continue
            self._patients[patient.id] = patient
            count += 1

        diagnoses_path = self._data_dir / "diagnoses.json"
        if diagnoses_path.exists():
            self._diagnoses = _DIAGNOSIS_LIST_ADAPTER.validate_json(
                diagnoses_path.read_bytes()
            )

        if count or self._diagnoses:
            logger.info(
                "[STORE] Loaded %d patient(s) and %d diagnosis code(s) from %s",
                count,
                len(self._diagnoses),
                self._data_dir,
            )

    def _write_atomic(self, target: Path, text: str) -> None:
        """Write *text* to a .tmp sibling, then rename over *target*."""
        tmp = target.with_suffix(".tmp")
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, target)

    def _save_patient(self, patient: Patient) -> None:
        if self._data_dir is None:
            return
        target = self._data_dir / "patients" / f"{patient.id}.json"
        self._write_atomic(
            target, json.dumps(patient.to_wire(), indent=2, ensure_ascii=False)
        )

    def _save_diagnoses(self) -> None:
        if self._data_dir is None:
            return
        data = [d.to_wire() for d in self._diagnoses]
        self._write_atomic(
            self._data_dir / "diagnoses.json",
            json.dumps(data, indent=2, ensure_ascii=False),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self._patients and not self._diagnoses

    async def list_patients(self) -> list[Patient]:
        return list(self._patients.values())

    async def get_patient(self, patient_id: str) -> Patient:
        """Return one patient.  Raises ResourceNotFoundError if missing."""
        patient = self._patients.get(patient_id)
        if patient is None:
            raise ResourceNotFoundError(f"Patient {patient_id} not found")
        return patient

    async def add_patient(self, new_patient: NewPatient, patient_id: str | None = None) -> Patient:
        """Store a new patient with an empty record."""
        async with self._lock:
            patient = Patient(
                id=patient_id or str(uuid.uuid4()),
                **new_patient.model_dump(),
            )
            self._patients[patient.id] = patient
            self._save_patient(patient)
        logger.info("[STORE] Added patient %s", patient.id)
        return patient

    async def add_entry(self, patient_id: str, payload: NewEntry) -> Entry:
        """Assign an id to *payload* and append it to the patient's record."""
        async with self._lock:
            patient = await self.get_patient(patient_id)
            entry = with_id(payload, str(uuid.uuid4()))
            patient = patient.with_entry(entry)
            self._patients[patient_id] = patient
            self._save_patient(patient)
        logger.info("[STORE] Added %s entry %s to patient %s", entry.kind, entry.id, patient_id)
        return entry

    async def get_diagnoses(self) -> list[Diagnosis]:
        return list(self._diagnoses)

    async def set_diagnoses(self, diagnoses: list[Diagnosis]) -> None:
        """Replace the diagnosis code table."""
        async with self._lock:
            self._diagnoses = list(diagnoses)
            self._save_diagnoses()


# --------------------------------------------------------------------------
# Global singleton (FastAPI dependency)
# --------------------------------------------------------------------------

_store: PatientJsonStore | None = None


def init_store(data_dir: str | Path | None = None) -> PatientJsonStore:
    """Create and set the global store.  Call once during startup."""
    global _store
    _store = PatientJsonStore(data_dir=data_dir)
    return _store


def get_store() -> PatientJsonStore:
    """Get the global store instance (used by FastAPI Depends)."""
    global _store
    if _store is None:
        _store = PatientJsonStore()
    return _store
