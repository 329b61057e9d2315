"""Entry and patient rendering.

Turns entries into display structures (``EntryView``) that a UI layer lays
out, plus a plain-text formatting of those structures for terminals and logs.

Every kind dispatch ends in ``unhandled_kind``: a new entry kind that is not
handled here is a type-checker error, and raises ``UnhandledEntryKindError``
the first time such an entry is rendered.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .errors import unhandled_kind
from .models import (
    Diagnosis,
    Entry,
    Gender,
    HealthCheckEntry,
    HealthCheckRating,
    HospitalEntry,
    OccupationalHealthcareEntry,
    Patient,
)


class EntryIcon(str, Enum):
    """Material icon names used by the entry cards."""

    HOSPITAL = "local_hospital"
    WORK = "work"
    HEART = "favorite"


# Heart color per rating, lowest severity first
RATING_COLORS: dict[HealthCheckRating, str] = {
    HealthCheckRating.HEALTHY: "green",
    HealthCheckRating.LOW_RISK: "yellow",
    HealthCheckRating.HIGH_RISK: "orange",
    HealthCheckRating.CRITICAL_RISK: "red",
}

RATING_LABELS: dict[HealthCheckRating, str] = {
    HealthCheckRating.HEALTHY: "Healthy",
    HealthCheckRating.LOW_RISK: "Low risk",
    HealthCheckRating.HIGH_RISK: "High risk",
    HealthCheckRating.CRITICAL_RISK: "Critical risk",
}

GENDER_SYMBOLS: dict[Gender, str] = {
    Gender.MALE: "♂️",
    Gender.FEMALE: "♀️",
    Gender.OTHER: "⚧",
}


# =============================================================================
# Display structures
# =============================================================================


class ViewModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class DiagnosisLine(ViewModel):
    """A diagnosis code with its resolved name (``None`` if unknown)."""

    code: str
    name: str | None = None

    @property
    def label(self) -> str:
        return f"{self.code} {self.name}" if self.name else self.code


class HealthIndicator(ViewModel):
    """Colored heart shown on health check entries."""

    rating: HealthCheckRating
    color: str
    label: str
    icon: EntryIcon = EntryIcon.HEART


class EntryView(ViewModel):
    """Everything a card needs to display one entry."""

    entry_id: str
    kind: str
    date: str
    icon: EntryIcon
    header_detail: str | None = None
    description: str
    diagnoses: list[DiagnosisLine] | None = None
    details: list[str] = Field(default_factory=list)
    health_indicator: HealthIndicator | None = None
    specialist_line: str


class PatientView(ViewModel):
    """Patient header plus the rendered entries, in record order."""

    patient_id: str
    title: str
    gender_symbol: str
    ssn_line: str
    occupation_line: str
    entries: list[EntryView] = Field(default_factory=list)
    empty_message: str | None = None


# =============================================================================
# Rendering
# =============================================================================


def _diagnosis_lines(
    codes: list[str] | None,
    lookup: Mapping[str, Diagnosis],
) -> list[DiagnosisLine] | None:
    if not codes:
        return None
    lines = []
    for code in codes:
        diagnosis = lookup.get(code)
        lines.append(DiagnosisLine(code=code, name=diagnosis.name if diagnosis else None))
    return lines


def health_indicator(rating: HealthCheckRating) -> HealthIndicator:
    """Map a health check rating to its heart marker."""
    return HealthIndicator(
        rating=rating,
        color=RATING_COLORS[rating],
        label=RATING_LABELS[rating],
    )


def render_entry(entry: Entry, lookup: Mapping[str, Diagnosis]) -> EntryView:
    """Render one entry into its kind-specific display structure.

    Args:
        entry: Entry of any kind
        lookup: Diagnosis code table (codes missing from it render bare)

    Raises:
        UnhandledEntryKindError: If *entry* is not one of the known kinds.
    """
    match entry:
        case HospitalEntry():
            icon = EntryIcon.HOSPITAL
            header_detail = None
            details = [
                f"Discharge: {entry.discharge.date.isoformat()} – {entry.discharge.criteria}"
            ]
            indicator = None
        case OccupationalHealthcareEntry():
            icon = EntryIcon.WORK
            header_detail = entry.employer_name
            details = []
            if entry.sick_leave is not None:
                details.append(
                    f"Sick leave: {entry.sick_leave.start_date.isoformat()}"
                    f" – {entry.sick_leave.end_date.isoformat()}"
                )
            indicator = None
        case HealthCheckEntry():
            icon = EntryIcon.HOSPITAL
            header_detail = None
            details = []
            indicator = health_indicator(entry.health_check_rating)
        case _:
            unhandled_kind(entry)

    return EntryView(
        entry_id=entry.id,
        kind=entry.kind,
        date=entry.date.isoformat(),
        icon=icon,
        header_detail=header_detail,
        description=entry.description,
        diagnoses=_diagnosis_lines(entry.diagnosis_codes, lookup),
        details=details,
        health_indicator=indicator,
        specialist_line=f"diagnose by {entry.specialist}",
    )


def render_patient(patient: Patient, lookup: Mapping[str, Diagnosis]) -> PatientView:
    """Render the patient header and every entry in record order."""
    symbol = GENDER_SYMBOLS.get(patient.gender, "")
    entries = [render_entry(entry, lookup) for entry in patient.entries]
    return PatientView(
        patient_id=patient.id,
        title=f"{patient.name} {symbol}".rstrip(),
        gender_symbol=symbol,
        ssn_line=f"SSN: {patient.ssn}",
        occupation_line=f"Occupation: {patient.occupation}",
        entries=entries,
        empty_message=None if entries else "No entries",
    )


# =============================================================================
# Plain-text formatting
# =============================================================================


def format_entry(view: EntryView) -> str:
    """Format an entry view as indented plain text."""
    header = f"{view.date} [{view.icon.value}]"
    if view.header_detail:
        header = f"{header} {view.header_detail}"

    lines = [header, f"  {view.description}"]
    for diagnosis in view.diagnoses or []:
        lines.append(f"  - {diagnosis.label}")
    if view.health_indicator is not None:
        hi = view.health_indicator
        lines.append(f"  [{hi.icon.value}:{hi.color}] {hi.label}")
    for detail in view.details:
        lines.append(f"  {detail}")
    lines.append(f"  {view.specialist_line}")
    return "\n".join(lines)


def format_patient(view: PatientView) -> str:
    """Format a patient view (header, then one block per entry)."""
    blocks = [
        "\n".join([view.title, view.ssn_line, view.occupation_line]),
        "Entries",
    ]
    if view.empty_message:
        blocks.append(view.empty_message)
    blocks.extend(format_entry(entry) for entry in view.entries)
    return "\n\n".join(blocks)
