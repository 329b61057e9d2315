"""Entry variant model.

An entry is one clinical record on a patient's chart.  Every entry shares the
base fields (description, date, specialist, diagnosis codes) and carries the
extra fields of exactly one kind:

- ``HealthCheck``: a four-level ``healthCheckRating``
- ``Hospital``: a required ``discharge`` (date + criteria)
- ``OccupationalHealthcare``: ``employerName`` and an optional ``sickLeave``

``NewEntry`` is the creation payload (no ``id``); ``Entry`` is what the
backend hands back.  Both are pydantic discriminated unions keyed on ``kind``.
"""

from __future__ import annotations

import logging
import datetime as dt
from enum import IntEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class HealthCheckRating(IntEnum):
    """Overall health rating recorded at a health check."""

    HEALTHY = 0
    LOW_RISK = 1
    HIGH_RISK = 2
    CRITICAL_RISK = 3


EntryKind = Literal["HealthCheck", "Hospital", "OccupationalHealthcare"]

ENTRY_KINDS: tuple[str, ...] = ("HealthCheck", "Hospital", "OccupationalHealthcare")


class WireModel(BaseModel):
    """Base for models exchanged with the backend (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump as a JSON-ready dict with camelCase keys and no null fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Composite values
# =============================================================================


class Discharge(WireModel):
    """Hospital discharge: always both date and criteria."""

    date: dt.date
    criteria: str = Field(..., min_length=1)


class SickLeave(WireModel):
    """Sick-leave period: always both start and end."""

    start_date: dt.date
    end_date: dt.date


# =============================================================================
# Creation payloads
# =============================================================================


class NewEntryBase(WireModel):
    """Fields shared by every entry kind."""

    description: str = Field(..., min_length=1)
    date: dt.date
    specialist: str = Field(..., min_length=1)
    diagnosis_codes: list[str] | None = Field(
        default=None,
        description="Diagnosis codes in selection order; None means none recorded",
    )


class NewHealthCheckEntry(NewEntryBase):
    kind: Literal["HealthCheck"] = "HealthCheck"
    health_check_rating: HealthCheckRating


class NewHospitalEntry(NewEntryBase):
    kind: Literal["Hospital"] = "Hospital"
    discharge: Discharge


class NewOccupationalHealthcareEntry(NewEntryBase):
    kind: Literal["OccupationalHealthcare"] = "OccupationalHealthcare"
    employer_name: str = Field(..., min_length=1)
    sick_leave: SickLeave | None = Field(
        default=None,
        description="Both dates or none; a payload with only one date is rejected",
    )


NewEntry = Annotated[
    NewHealthCheckEntry | NewHospitalEntry | NewOccupationalHealthcareEntry,
    Field(discriminator="kind"),
]


# =============================================================================
# Stored entries (backend-assigned id)
# =============================================================================


class HealthCheckEntry(NewHealthCheckEntry):
    id: str = Field(..., min_length=1)


class HospitalEntry(NewHospitalEntry):
    id: str = Field(..., min_length=1)


class OccupationalHealthcareEntry(NewOccupationalHealthcareEntry):
    id: str = Field(..., min_length=1)

    @field_validator("sick_leave", mode="before")
    @classmethod
    def drop_one_sided_sick_leave(cls, v: Any) -> Any:
        """Treat a stored sick-leave period missing either date as absent."""
        if isinstance(v, dict):
            start = v.get("startDate", v.get("start_date"))
            end = v.get("endDate", v.get("end_date"))
            if not start or not end:
                logger.warning(
                    "[ENTRY] Dropping one-sided sick leave (start=%r, end=%r)", start, end
                )
                return None
        return v


Entry = Annotated[
    HealthCheckEntry | HospitalEntry | OccupationalHealthcareEntry,
    Field(discriminator="kind"),
]

# Stored class for each creation payload class
_STORED_TYPES: dict[type[BaseModel], type[BaseModel]] = {
    NewHealthCheckEntry: HealthCheckEntry,
    NewHospitalEntry: HospitalEntry,
    NewOccupationalHealthcareEntry: OccupationalHealthcareEntry,
}


def with_id(payload: NewEntry, entry_id: str) -> Entry:
    """Attach a backend-assigned id to a creation payload."""
    stored_type = _STORED_TYPES[type(payload)]
    return stored_type(id=entry_id, **payload.model_dump())
