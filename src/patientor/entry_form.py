"""Entry form state and the form-to-entry builder.

The add-entry form collects everything as text: dates from date inputs, the
rating from a select, codes from a multi-select.  Each entry kind has its own
typed form state (``HealthCheckForm``, ``HospitalForm``,
``OccupationalHealthcareForm``) mirroring the ``Entry`` union, so a field
that belongs to another kind can never leak into a payload.

``build_entry`` turns a form into a validated ``NewEntry`` or raises
``EntryFormError`` with a discriminated reason.  It has no side effects;
submitting the payload is the controller's job.

Usage:
    form = parse_entry_form("Hospital", {
        "description": "Hip replacement",
        "date": "2024-03-01",
        "specialist": "Dr. House",
        "dischargeDate": "2024-03-09",
        "dischargeCriteria": "Wound healed",
    })
    payload = build_entry(form)
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import EntryFormError, FormErrorReason, unhandled_kind
from .models import (
    Discharge,
    EntryKind,
    HealthCheckRating,
    NewEntry,
    NewHealthCheckEntry,
    NewHospitalEntry,
    NewOccupationalHealthcareEntry,
    SickLeave,
)

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# =============================================================================
# Form state
# =============================================================================


class EntryFormBase(BaseModel):
    """Raw values of the fields every entry kind shares."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    description: str = ""
    date: str = ""
    specialist: str = ""
    diagnosis_codes: list[str] = Field(default_factory=list)


class HealthCheckForm(EntryFormBase):
    kind: Literal["HealthCheck"] = "HealthCheck"
    health_check_rating: str = ""


class HospitalForm(EntryFormBase):
    kind: Literal["Hospital"] = "Hospital"
    discharge_date: str = ""
    discharge_criteria: str = ""


class OccupationalHealthcareForm(EntryFormBase):
    kind: Literal["OccupationalHealthcare"] = "OccupationalHealthcare"
    employer_name: str = ""
    sick_leave_start: str = ""
    sick_leave_end: str = ""


EntryForm = Annotated[
    HealthCheckForm | HospitalForm | OccupationalHealthcareForm,
    Field(discriminator="kind"),
]

FORM_TYPES: dict[str, type[EntryFormBase]] = {
    "HealthCheck": HealthCheckForm,
    "Hospital": HospitalForm,
    "OccupationalHealthcare": OccupationalHealthcareForm,
}

_SHARED_FIELDS = frozenset(
    (info.alias or name) for name, info in EntryFormBase.model_fields.items()
)


def _form_fields(form_type: type[EntryFormBase]) -> set[str]:
    """Wire names of the kind-specific fields of *form_type*."""
    names = {(info.alias or name) for name, info in form_type.model_fields.items()}
    return names - _SHARED_FIELDS - {"kind"}


def _form_type_for(kind: str) -> type[EntryFormBase]:
    form_type = FORM_TYPES.get(kind)
    if form_type is None:
        raise EntryFormError(
            FormErrorReason.KIND_MISMATCH,
            "kind",
            f"Unknown entry type: {kind!r}",
        )
    return form_type


def blank_form(kind: EntryKind, carry_over: EntryFormBase | None = None) -> EntryForm:
    """Empty form for *kind*, optionally keeping the shared fields of another form."""
    form_type = _form_type_for(kind)
    if carry_over is None:
        return form_type()
    return form_type(
        description=carry_over.description,
        date=carry_over.date,
        specialist=carry_over.specialist,
        diagnosis_codes=list(carry_over.diagnosis_codes),
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_codes(value: Any) -> list[str]:
    # A multi-select may report its value as one comma-separated string
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",")
    if isinstance(value, Sequence):
        return [_as_text(v) for v in value]
    return [_as_text(value)]


def parse_entry_form(kind: str, fields: Mapping[str, Any]) -> EntryForm:
    """Build typed form state from untyped submitted fields.

    Field names follow the add-entry form (``description``, ``date``,
    ``specialist``, ``diagnosisCodes``, ``healthCheckRating``,
    ``dischargeDate``, ``dischargeCriteria``, ``employerName``,
    ``sickLeaveStart``, ``sickLeaveEnd``).  Unknown names are ignored.

    Raises:
        EntryFormError: ``kind_mismatch`` if *kind* is not a known entry kind,
            or if a field belonging to a different kind carries a value.
    """
    form_type = _form_type_for(kind)
    own_fields = _form_fields(form_type)

    for other_type in FORM_TYPES.values():
        if other_type is form_type:
            continue
        for name in sorted(_form_fields(other_type) - own_fields):
            if _as_text(fields.get(name)).strip():
                raise EntryFormError(
                    FormErrorReason.KIND_MISMATCH,
                    name,
                    f"Field '{name}' does not apply to {kind} entries",
                )

    values: dict[str, Any] = {}
    for name in (own_fields | _SHARED_FIELDS):
        if name not in fields:
            continue
        if name == "diagnosisCodes":
            values[name] = _as_codes(fields[name])
        else:
            values[name] = _as_text(fields[name])

    return form_type.model_validate(values)


# =============================================================================
# Field extraction
# =============================================================================


def _required_text(value: str, field: str, label: str) -> str:
    text = value.strip()
    if not text:
        raise EntryFormError(FormErrorReason.MISSING_FIELD, field, f"{label} is required")
    return text


def _parse_date(value: str, field: str, label: str) -> dt.date:
    text = _required_text(value, field, label)
    if _ISO_DATE.match(text):
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            pass
    raise EntryFormError(
        FormErrorReason.MALFORMED_DATE,
        field,
        f"{label} must be a valid date (YYYY-MM-DD), got {text!r}",
    )


def _parse_rating(value: str) -> HealthCheckRating:
    text = value.strip()
    try:
        number = int(text)
    except ValueError:
        raise EntryFormError(
            FormErrorReason.MALFORMED_VALUE,
            "healthCheckRating",
            f"Invalid health check rating {text!r}: expected a whole number 0-3",
        ) from None
    try:
        return HealthCheckRating(number)
    except ValueError:
        raise EntryFormError(
            FormErrorReason.OUT_OF_RANGE,
            "healthCheckRating",
            f"Invalid health check rating {number}: must be between 0 and 3",
        ) from None


def _parse_codes(codes: Sequence[str]) -> list[str] | None:
    """Strip, drop blanks and duplicates (first wins); empty means no diagnoses."""
    seen: dict[str, None] = {}
    for code in codes:
        code = code.strip()
        if code:
            seen.setdefault(code, None)
    return list(seen) or None


def _parse_discharge(form: HospitalForm) -> Discharge:
    missing = [
        name
        for name, value in (
            ("dischargeDate", form.discharge_date),
            ("dischargeCriteria", form.discharge_criteria),
        )
        if not value.strip()
    ]
    if missing:
        raise EntryFormError(
            FormErrorReason.MISSING_FIELD,
            missing[0],
            "Missing discharge data: discharge date and criteria are both required",
        )
    return Discharge(
        date=_parse_date(form.discharge_date, "dischargeDate", "Discharge date"),
        criteria=form.discharge_criteria.strip(),
    )


def _parse_sick_leave(form: OccupationalHealthcareForm) -> SickLeave | None:
    start = form.sick_leave_start.strip()
    end = form.sick_leave_end.strip()
    if not start and not end:
        return None
    if not start or not end:
        raise EntryFormError(
            FormErrorReason.INCOMPLETE_PAIR,
            "sickLeaveEnd" if start else "sickLeaveStart",
            "Incomplete sick leave: give both a start and an end date, or neither",
        )
    start_date = _parse_date(start, "sickLeaveStart", "Sick leave start date")
    end_date = _parse_date(end, "sickLeaveEnd", "Sick leave end date")
    if end_date < start_date:
        raise EntryFormError(
            FormErrorReason.OUT_OF_RANGE,
            "sickLeaveEnd",
            "Sick leave cannot end before it starts",
        )
    return SickLeave(start_date=start_date, end_date=end_date)


# =============================================================================
# Builder
# =============================================================================


def build_entry(form: EntryForm) -> NewEntry:
    """Validate *form* and produce the entry-creation payload.

    Shared fields are checked first (description, date, specialist), then the
    kind-specific ones.

    Raises:
        EntryFormError: On the first invalid field.
        UnhandledEntryKindError: If *form* is not one of the known form kinds.
    """
    base = {
        "description": _required_text(form.description, "description", "Description"),
        "date": _parse_date(form.date, "date", "Entry date"),
        "specialist": _required_text(form.specialist, "specialist", "Specialist"),
        "diagnosis_codes": _parse_codes(form.diagnosis_codes),
    }

    match form:
        case HealthCheckForm():
            return NewHealthCheckEntry(
                **base,
                health_check_rating=_parse_rating(form.health_check_rating),
            )
        case HospitalForm():
            return NewHospitalEntry(**base, discharge=_parse_discharge(form))
        case OccupationalHealthcareForm():
            return NewOccupationalHealthcareEntry(
                **base,
                employer_name=_required_text(
                    form.employer_name, "employerName", "Employer name"
                ),
                sick_leave=_parse_sick_leave(form),
            )
        case _:
            unhandled_kind(form)


def try_build_entry(form: EntryForm) -> tuple[NewEntry | None, EntryFormError | None]:
    """Like :func:`build_entry` but returns ``(payload, error)`` instead of raising."""
    try:
        return build_entry(form), None
    except EntryFormError as e:
        logger.debug("[ENTRY_FORM] %s form rejected: %r", form.kind, e)
        return None, e


def build_entry_from_fields(kind: str, fields: Mapping[str, Any]) -> NewEntry:
    """Parse untyped submitted fields and build the payload in one step."""
    return build_entry(parse_entry_form(kind, fields))
