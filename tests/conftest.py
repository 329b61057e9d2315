"""Shared fixtures for patientor tests."""

from __future__ import annotations

import asyncio
import datetime as dt

import pytest

from patientor.diagnoses import DiagnosisLookup
from patientor.errors import BackendError, PatientNotFoundError
from patientor.models import (
    Diagnosis,
    Discharge,
    Gender,
    HealthCheckEntry,
    HealthCheckRating,
    HospitalEntry,
    OccupationalHealthcareEntry,
    Patient,
    SickLeave,
    with_id,
)


class FakeBackend:
    """In-memory ``PatientBackend`` with failure injection and call gates.

    Set ``get_gate`` / ``append_gate`` to an ``asyncio.Event`` to hold the
    corresponding call until the test releases it.
    """

    def __init__(self, patients: list[Patient] | None = None, diagnoses: list[Diagnosis] | None = None):
        self.patients = {p.id: p for p in patients or []}
        self.diagnoses = list(diagnoses or [])
        self.get_calls: list[str] = []
        self.append_calls: list[tuple[str, object]] = []
        self.get_error: BackendError | None = None
        self.append_error: Exception | None = None
        self.get_gate: asyncio.Event | None = None
        self.append_gate: asyncio.Event | None = None

    async def get_patient(self, patient_id: str) -> Patient:
        self.get_calls.append(patient_id)
        if self.get_gate is not None:
            await self.get_gate.wait()
        if self.get_error is not None:
            raise self.get_error
        if patient_id not in self.patients:
            raise PatientNotFoundError(f"Patient {patient_id} not found", status_code=404)
        return self.patients[patient_id]

    async def append_entry(self, patient_id: str, payload):
        self.append_calls.append((patient_id, payload))
        if self.append_gate is not None:
            await self.append_gate.wait()
        if self.append_error is not None:
            raise self.append_error
        entry = with_id(payload, f"entry-{len(self.append_calls)}")
        self.patients[patient_id] = self.patients[patient_id].with_entry(entry)
        return entry

    async def list_patients(self):
        return [p.summary() for p in self.patients.values()]

    async def get_diagnoses(self):
        return list(self.diagnoses)


@pytest.fixture
def diagnoses() -> list[Diagnosis]:
    return [
        Diagnosis(code="S62.5", name="Fracture of thumb", latin="Fractura [ossis] pollicis"),
        Diagnosis(code="Z57.1", name="Occupational exposure to radiation"),
        Diagnosis(code="M24.2", name="Disorder of ligament"),
    ]


@pytest.fixture
def lookup(diagnoses) -> DiagnosisLookup:
    return DiagnosisLookup(diagnoses)


@pytest.fixture
def hospital_entry() -> HospitalEntry:
    return HospitalEntry(
        id="h-1",
        date=dt.date(2015, 1, 2),
        specialist="MD House",
        description="Healing time appr. 2 weeks.",
        diagnosis_codes=["S62.5"],
        discharge=Discharge(date=dt.date(2015, 1, 16), criteria="Thumb has healed."),
    )


@pytest.fixture
def occupational_entry() -> OccupationalHealthcareEntry:
    return OccupationalHealthcareEntry(
        id="o-1",
        date=dt.date(2019, 8, 5),
        specialist="MD House",
        description="Minor radiation poisoning.",
        employer_name="HyPD",
        diagnosis_codes=["Z57.1", "X00.0"],
        sick_leave=SickLeave(start_date=dt.date(2019, 8, 5), end_date=dt.date(2019, 8, 28)),
    )


@pytest.fixture
def health_check_entry() -> HealthCheckEntry:
    return HealthCheckEntry(
        id="hc-1",
        date=dt.date(2019, 10, 20),
        specialist="MD House",
        description="Yearly control visit.",
        health_check_rating=HealthCheckRating.HEALTHY,
    )


@pytest.fixture
def empty_patient() -> Patient:
    return Patient(
        id="p-1",
        name="Dana Scully",
        date_of_birth=dt.date(1974, 1, 5),
        ssn="050174-432N",
        gender=Gender.FEMALE,
        occupation="Forensic Pathologist",
    )


@pytest.fixture
def backend(empty_patient, diagnoses) -> FakeBackend:
    return FakeBackend(patients=[empty_patient], diagnoses=diagnoses)
