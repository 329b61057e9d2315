"""Protocol definitions for patientor interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import Diagnosis, Entry, NewEntry, NonSensitivePatient, Patient


@runtime_checkable
class PatientBackend(Protocol):
    """Protocol for the patient record backend.

    The HTTP ``PatientsClient`` implements this interface; tests substitute
    in-memory fakes.  Failures are reported with the ``BackendError`` family
    from :mod:`patientor.errors`.
    """

    async def get_patient(self, patient_id: str) -> Patient:
        """Fetch one patient with all entries.

        Raises:
            PatientNotFoundError: If no patient has this id.
            BackendError: On any other failure.
        """
        ...

    async def append_entry(self, patient_id: str, payload: NewEntry) -> Entry:
        """Append an entry to a patient's record.

        Returns:
            The stored entry, with its backend-assigned id.

        Raises:
            EntryRejectedError: If the backend refuses the payload.
            BackendError: On any other failure.
        """
        ...

    async def list_patients(self) -> list[NonSensitivePatient]:
        """List all patients without sensitive fields."""
        ...

    async def get_diagnoses(self) -> list[Diagnosis]:
        """Fetch the diagnosis code table."""
        ...
