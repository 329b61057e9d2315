"""Patient record data models."""

from .entries import (
    ENTRY_KINDS,
    Discharge,
    Entry,
    EntryKind,
    HealthCheckEntry,
    HealthCheckRating,
    HospitalEntry,
    NewEntry,
    NewEntryBase,
    NewHealthCheckEntry,
    NewHospitalEntry,
    NewOccupationalHealthcareEntry,
    OccupationalHealthcareEntry,
    SickLeave,
    WireModel,
    with_id,
)
from .patient import Diagnosis, Gender, NewPatient, NonSensitivePatient, Patient

__all__ = [
    # Entry variants
    "ENTRY_KINDS",
    "EntryKind",
    "Entry",
    "NewEntry",
    "NewEntryBase",
    "HealthCheckEntry",
    "HospitalEntry",
    "OccupationalHealthcareEntry",
    "NewHealthCheckEntry",
    "NewHospitalEntry",
    "NewOccupationalHealthcareEntry",
    "HealthCheckRating",
    "Discharge",
    "SickLeave",
    "WireModel",
    "with_id",
    # Patient models
    "Patient",
    "NewPatient",
    "NonSensitivePatient",
    "Gender",
    "Diagnosis",
]
