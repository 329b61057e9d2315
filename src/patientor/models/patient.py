"""Patient and diagnosis models."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import Field

from .entries import Entry, WireModel


class Gender(str, Enum):
    """Patient gender (lowercase on the wire)."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Diagnosis(WireModel):
    """A diagnosis code with its display name."""

    code: str = Field(..., min_length=1)
    name: str
    latin: str | None = None


class NewPatient(WireModel):
    """Patient details as submitted when creating a patient."""

    name: str = Field(..., min_length=1)
    date_of_birth: dt.date
    ssn: str = Field(..., min_length=1)
    gender: Gender
    occupation: str = Field(..., min_length=1)


class NonSensitivePatient(WireModel):
    """Patient summary for list views (no SSN, no entries)."""

    id: str
    name: str
    date_of_birth: dt.date
    gender: Gender
    occupation: str


class Patient(NewPatient):
    """Full patient record with its chronological entries."""

    id: str = Field(..., min_length=1)
    entries: tuple[Entry, ...] = Field(
        default=(),
        description="Entries in insertion order; append-only",
    )

    def with_entry(self, entry: Entry) -> Patient:
        """Return a copy with *entry* appended to the end of the record."""
        return self.model_copy(update={"entries": (*self.entries, entry)})

    def summary(self) -> NonSensitivePatient:
        """Strip SSN and entries for list views."""
        return NonSensitivePatient(
            id=self.id,
            name=self.name,
            date_of_birth=self.date_of_birth,
            gender=self.gender,
            occupation=self.occupation,
        )
