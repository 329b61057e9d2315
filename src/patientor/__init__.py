"""Patientor - patient records with typed, heterogeneous clinical entries."""

from .controller import PatientRecordController
from .diagnoses import DiagnosisLookup
from .entry_form import (
    EntryForm,
    HealthCheckForm,
    HospitalForm,
    OccupationalHealthcareForm,
    build_entry,
    parse_entry_form,
)
from .errors import (
    BackendError,
    EntryFormError,
    EntryRejectedError,
    FormErrorReason,
    PatientNotFoundError,
    UnhandledEntryKindError,
)
from .rendering import EntryView, PatientView, render_entry, render_patient


# Lazy imports to avoid loading httpx when only the core is used
def __getattr__(name: str):
    if name == "PatientsClient":
        from .client import PatientsClient
        return PatientsClient
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "DiagnosisLookup",
    "EntryForm",
    "HealthCheckForm",
    "HospitalForm",
    "OccupationalHealthcareForm",
    "build_entry",
    "parse_entry_form",
    "EntryView",
    "PatientView",
    "render_entry",
    "render_patient",
    "BackendError",
    "EntryFormError",
    "EntryRejectedError",
    "FormErrorReason",
    "PatientNotFoundError",
    "UnhandledEntryKindError",
    "PatientsClient",
    "PatientRecordController",
]
