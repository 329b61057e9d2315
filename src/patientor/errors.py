"""Exception hierarchy for patientor."""

from __future__ import annotations

from enum import Enum
from typing import Never


class PatientorError(Exception):
    """Base exception for all patientor errors."""


# =============================================================================
# Backend boundary
# =============================================================================


class BackendError(PatientorError):
    """Raised when a backend request fails (transport or HTTP error)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PatientNotFoundError(BackendError):
    """Raised when the requested patient does not exist."""


class EntryRejectedError(BackendError):
    """Raised when the backend refuses an entry-creation payload."""


# =============================================================================
# Entry form validation
# =============================================================================


class FormErrorReason(str, Enum):
    """Why an entry form could not be turned into a payload."""

    KIND_MISMATCH = "kind_mismatch"
    MISSING_FIELD = "missing_field"
    OUT_OF_RANGE = "out_of_range"
    MALFORMED_DATE = "malformed_date"
    MALFORMED_VALUE = "malformed_value"
    INCOMPLETE_PAIR = "incomplete_pair"


class EntryFormError(PatientorError):
    """Raised when raw form input does not make a valid entry.

    Attributes:
        reason: Discriminated failure reason
        field: Form field the failure refers to (``None`` for form-wide errors)
        message: User-facing message
    """

    def __init__(self, reason: FormErrorReason, field: str | None, message: str):
        super().__init__(message)
        self.reason = reason
        self.field = field
        self.message = message

    def __repr__(self) -> str:
        return f"EntryFormError(reason={self.reason.value!r}, field={self.field!r}, message={self.message!r})"


# =============================================================================
# Invariant violations
# =============================================================================


class UnhandledEntryKindError(PatientorError, TypeError):
    """Raised when an entry of an unknown kind reaches a kind dispatch."""

    def __init__(self, value: object):
        kind = getattr(value, "kind", type(value).__name__)
        super().__init__(f"Unhandled entry kind: {kind!r}")
        self.value = value


def unhandled_kind(value: Never) -> Never:
    """Exhaustiveness guard for matches over entry kinds.

    Type checkers flag any call site where ``value`` is not narrowed to
    ``Never``; at runtime the call raises ``UnhandledEntryKindError``.
    """
    raise UnhandledEntryKindError(value)
