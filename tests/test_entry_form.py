"""Tests for the add-entry form builder.

These tests verify that raw form values become the right entry payload, or
fail with the right reason and field.
"""

import datetime as dt
from typing import Literal

import pytest

from patientor.entry_form import (
    EntryFormBase,
    HealthCheckForm,
    HospitalForm,
    OccupationalHealthcareForm,
    blank_form,
    build_entry,
    build_entry_from_fields,
    parse_entry_form,
    try_build_entry,
)
from patientor.errors import EntryFormError, FormErrorReason, UnhandledEntryKindError
from patientor.models import (
    HealthCheckRating,
    NewHealthCheckEntry,
    NewHospitalEntry,
    NewOccupationalHealthcareEntry,
)

SHARED = {
    "description": "Yearly control visit.",
    "date": "2019-10-20",
    "specialist": "MD House",
}


def assert_form_error(form, reason: FormErrorReason, field: str | None) -> EntryFormError:
    with pytest.raises(EntryFormError) as exc_info:
        build_entry(form)
    assert exc_info.value.reason is reason
    assert exc_info.value.field == field
    return exc_info.value


# =============================================================================
# Health check
# =============================================================================


class TestHealthCheck:
    """Test building health check payloads."""

    @pytest.mark.parametrize("raw,rating", [
        ("0", HealthCheckRating.HEALTHY),
        ("1", HealthCheckRating.LOW_RISK),
        ("2", HealthCheckRating.HIGH_RISK),
        ("3", HealthCheckRating.CRITICAL_RISK),
    ])
    def test_valid_rating(self, raw, rating):
        payload = build_entry(HealthCheckForm(**SHARED, health_check_rating=raw))
        assert isinstance(payload, NewHealthCheckEntry)
        assert payload.health_check_rating is rating

    def test_payload_carries_only_health_check_fields(self):
        payload = build_entry(HealthCheckForm(**SHARED, health_check_rating="0"))
        assert payload.to_wire() == {
            "kind": "HealthCheck",
            "description": "Yearly control visit.",
            "date": "2019-10-20",
            "specialist": "MD House",
            "healthCheckRating": 0,
        }

    @pytest.mark.parametrize("raw", ["4", "-1", "99"])
    def test_rating_out_of_range(self, raw):
        assert_form_error(
            HealthCheckForm(**SHARED, health_check_rating=raw),
            FormErrorReason.OUT_OF_RANGE,
            "healthCheckRating",
        )

    @pytest.mark.parametrize("raw", ["", "abc", "1.5"])
    def test_rating_not_a_number(self, raw):
        assert_form_error(
            HealthCheckForm(**SHARED, health_check_rating=raw),
            FormErrorReason.MALFORMED_VALUE,
            "healthCheckRating",
        )


# =============================================================================
# Hospital
# =============================================================================


class TestHospital:
    """Test building hospital payloads."""

    def test_valid_discharge(self):
        payload = build_entry(HospitalForm(
            **SHARED,
            discharge_date="2019-10-28",
            discharge_criteria="Thumb has healed.",
        ))
        assert isinstance(payload, NewHospitalEntry)
        assert payload.discharge.date == dt.date(2019, 10, 28)
        assert payload.discharge.criteria == "Thumb has healed."

    def test_missing_criteria(self):
        error = assert_form_error(
            HospitalForm(**SHARED, discharge_date="2019-10-28"),
            FormErrorReason.MISSING_FIELD,
            "dischargeCriteria",
        )
        assert error.message.startswith("Missing discharge data")

    def test_missing_date(self):
        assert_form_error(
            HospitalForm(**SHARED, discharge_criteria="Healed"),
            FormErrorReason.MISSING_FIELD,
            "dischargeDate",
        )

    def test_missing_both_names_the_date(self):
        assert_form_error(HospitalForm(**SHARED), FormErrorReason.MISSING_FIELD, "dischargeDate")

    def test_malformed_discharge_date(self):
        assert_form_error(
            HospitalForm(**SHARED, discharge_date="28.10.2019", discharge_criteria="Healed"),
            FormErrorReason.MALFORMED_DATE,
            "dischargeDate",
        )


# =============================================================================
# Occupational healthcare
# =============================================================================


class TestOccupationalHealthcare:
    """Test building occupational healthcare payloads."""

    def test_without_sick_leave(self):
        payload = build_entry(OccupationalHealthcareForm(**SHARED, employer_name="FBI"))
        assert isinstance(payload, NewOccupationalHealthcareEntry)
        assert payload.employer_name == "FBI"
        assert payload.sick_leave is None
        assert "sickLeave" not in payload.to_wire()

    def test_with_sick_leave(self):
        payload = build_entry(OccupationalHealthcareForm(
            **SHARED,
            employer_name="FBI",
            sick_leave_start="2019-08-05",
            sick_leave_end="2019-08-28",
        ))
        assert payload.sick_leave is not None
        assert payload.sick_leave.start_date == dt.date(2019, 8, 5)
        assert payload.sick_leave.end_date == dt.date(2019, 8, 28)

    def test_missing_employer(self):
        error = assert_form_error(
            OccupationalHealthcareForm(**SHARED, employer_name="  "),
            FormErrorReason.MISSING_FIELD,
            "employerName",
        )
        assert error.message == "Employer name is required"

    def test_only_start_date(self):
        assert_form_error(
            OccupationalHealthcareForm(**SHARED, employer_name="FBI", sick_leave_start="2019-08-05"),
            FormErrorReason.INCOMPLETE_PAIR,
            "sickLeaveEnd",
        )

    def test_only_end_date(self):
        assert_form_error(
            OccupationalHealthcareForm(**SHARED, employer_name="FBI", sick_leave_end="2019-08-28"),
            FormErrorReason.INCOMPLETE_PAIR,
            "sickLeaveStart",
        )

    def test_sick_leave_ending_before_start(self):
        assert_form_error(
            OccupationalHealthcareForm(
                **SHARED,
                employer_name="FBI",
                sick_leave_start="2019-08-28",
                sick_leave_end="2019-08-05",
            ),
            FormErrorReason.OUT_OF_RANGE,
            "sickLeaveEnd",
        )


# =============================================================================
# Shared fields
# =============================================================================


class TestSharedFields:
    """Test the fields every kind shares."""

    @pytest.mark.parametrize("field,label", [
        ("description", "Description"),
        ("date", "Entry date"),
        ("specialist", "Specialist"),
    ])
    def test_missing_shared_field(self, field, label):
        values = {**SHARED, field: ""}
        error = assert_form_error(
            HealthCheckForm(**values, health_check_rating="0"),
            FormErrorReason.MISSING_FIELD,
            field,
        )
        assert error.message == f"{label} is required"

    @pytest.mark.parametrize("raw", ["2019-13-01", "2019-02-30", "20191020", "yesterday"])
    def test_malformed_entry_date(self, raw):
        assert_form_error(
            HealthCheckForm(**{**SHARED, "date": raw}, health_check_rating="0"),
            FormErrorReason.MALFORMED_DATE,
            "date",
        )

    def test_shared_fields_are_checked_before_kind_fields(self):
        assert_form_error(
            HospitalForm(description="x", date="", specialist="y"),
            FormErrorReason.MISSING_FIELD,
            "date",
        )

    def test_no_codes_means_absent(self):
        payload = build_entry(HealthCheckForm(**SHARED, health_check_rating="0"))
        assert payload.diagnosis_codes is None
        assert "diagnosisCodes" not in payload.to_wire()

    def test_codes_keep_selection_order_without_duplicates(self):
        payload = build_entry(HealthCheckForm(
            **SHARED,
            health_check_rating="0",
            diagnosis_codes=["Z57.1", " M24.2 ", "Z57.1", ""],
        ))
        assert payload.diagnosis_codes == ["Z57.1", "M24.2"]

    def test_unknown_codes_are_kept(self):
        payload = build_entry(HealthCheckForm(
            **SHARED, health_check_rating="0", diagnosis_codes=["X00.0"]
        ))
        assert payload.diagnosis_codes == ["X00.0"]

    def test_values_are_trimmed(self):
        payload = build_entry(HealthCheckForm(
            description="  Checkup ", date=" 2019-10-20 ", specialist=" MD House ",
            health_check_rating=" 1 ",
        ))
        assert payload.description == "Checkup"
        assert payload.date == dt.date(2019, 10, 20)
        assert payload.specialist == "MD House"


# =============================================================================
# Untyped fields
# =============================================================================


class TestParseEntryForm:
    """Test turning submitted field maps into typed forms."""

    def test_parses_kind_fields(self):
        form = parse_entry_form("Hospital", {
            **SHARED,
            "dischargeDate": "2019-10-28",
            "dischargeCriteria": "Healed",
        })
        assert isinstance(form, HospitalForm)
        assert form.discharge_date == "2019-10-28"

    def test_unknown_kind(self):
        with pytest.raises(EntryFormError) as exc_info:
            parse_entry_form("Surgery", SHARED)
        assert exc_info.value.reason is FormErrorReason.KIND_MISMATCH
        assert exc_info.value.field == "kind"

    def test_field_of_another_kind_is_rejected(self):
        with pytest.raises(EntryFormError) as exc_info:
            parse_entry_form("HealthCheck", {
                **SHARED,
                "healthCheckRating": "0",
                "employerName": "FBI",
            })
        assert exc_info.value.reason is FormErrorReason.KIND_MISMATCH
        assert exc_info.value.field == "employerName"

    def test_blank_field_of_another_kind_is_ignored(self):
        form = parse_entry_form("HealthCheck", {
            **SHARED,
            "healthCheckRating": "0",
            "employerName": "",
            "dischargeDate": None,
        })
        assert isinstance(form, HealthCheckForm)

    def test_unknown_names_are_ignored(self):
        form = parse_entry_form("HealthCheck", {**SHARED, "healthCheckRating": "0", "colour": "blue"})
        assert form.health_check_rating == "0"

    def test_comma_separated_codes(self):
        form = parse_entry_form("HealthCheck", {**SHARED, "diagnosisCodes": "Z57.1,M24.2"})
        assert form.diagnosis_codes == ["Z57.1", "M24.2"]

    def test_build_from_fields(self):
        payload = build_entry_from_fields("OccupationalHealthcare", {
            **SHARED,
            "employerName": "FBI",
            "sickLeaveStart": "2019-08-05",
            "sickLeaveEnd": "2019-08-28",
        })
        assert isinstance(payload, NewOccupationalHealthcareEntry)
        assert payload.sick_leave is not None


class TestHelpers:
    """Test blank forms, the non-raising builder and the exhaustiveness guard."""

    def test_blank_form(self):
        form = blank_form("OccupationalHealthcare")
        assert isinstance(form, OccupationalHealthcareForm)
        assert form.employer_name == ""

    def test_blank_form_keeps_shared_fields(self):
        source = HealthCheckForm(**SHARED, diagnosis_codes=["Z57.1"], health_check_rating="2")
        form = blank_form("Hospital", carry_over=source)
        assert isinstance(form, HospitalForm)
        assert form.description == SHARED["description"]
        assert form.diagnosis_codes == ["Z57.1"]
        assert form.discharge_date == ""

    def test_try_build_entry(self):
        payload, error = try_build_entry(HealthCheckForm(**SHARED, health_check_rating="3"))
        assert error is None
        assert payload.health_check_rating is HealthCheckRating.CRITICAL_RISK

        payload, error = try_build_entry(HealthCheckForm(**SHARED, health_check_rating="7"))
        assert payload is None
        assert error.reason is FormErrorReason.OUT_OF_RANGE

    def test_unhandled_form_kind_raises(self):
        class SurgeryForm(EntryFormBase):
            kind: Literal["Surgery"] = "Surgery"

        with pytest.raises(UnhandledEntryKindError, match="Surgery"):
            build_entry(SurgeryForm(**SHARED))
