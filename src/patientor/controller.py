"""Patient record controller.

Holds one patient's record for the lifetime of a view and drives its
lifecycle:

    Loading --fetch ok--> Ready --append ok--> Ready (entry merged, form closed)
       |                    |
       |                    +--form invalid / append failed--> Ready (error shown, form open)
       +--fetch failed / no id--> Error

Backend calls are ``await`` points.  Once the view is torn down, results that
resolve late are dropped instead of being applied.  While an append is
outstanding, further submissions are refused.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .diagnoses import DiagnosisLookup
from .entry_form import EntryForm, blank_form, build_entry
from .errors import BackendError, EntryFormError, EntryRejectedError
from .models import Diagnosis, Entry, EntryKind, Patient
from .protocols import PatientBackend
from .rendering import PatientView, render_patient

logger = logging.getLogger(__name__)

NO_PATIENT_ID_MESSAGE = "No patient id provided"
FETCH_FAILED_MESSAGE = "Could not fetch patient data"
SUBMIT_FAILED_MESSAGE = "Unknown error"
DEFAULT_ENTRY_KIND: EntryKind = "HealthCheck"


# =============================================================================
# State snapshots
# =============================================================================


class _State(BaseModel):
    model_config = ConfigDict(frozen=True)


class LoadingState(_State):
    """Patient fetch in flight."""

    status: Literal["loading"] = "loading"
    patient_id: str


class ErrorState(_State):
    """The view could not load its patient.  Terminal for the view."""

    status: Literal["error"] = "error"
    message: str


class ReadyState(_State):
    """Patient loaded; the add-entry form may be open."""

    status: Literal["ready"] = "ready"
    patient: Patient
    form_open: bool = False
    form: EntryForm = Field(default_factory=lambda: blank_form(DEFAULT_ENTRY_KIND))
    entry_error: str | None = Field(
        default=None, description="Transient add-entry failure message"
    )
    entry_error_field: str | None = None
    submitting: bool = False


RecordState = LoadingState | ErrorState | ReadyState

StateListener = Callable[[RecordState], None]


class ControllerStateError(RuntimeError):
    """Raised when an operation is attempted in a state that does not allow it."""


# =============================================================================
# Controller
# =============================================================================


class PatientRecordController:
    """Owns one patient's in-memory record for a single view.

    Usage:
        controller = await PatientRecordController.mount(client, patient_id, diagnoses)
        controller.open_form()
        controller.edit_form(description="Yearly control", date="2024-05-01", ...)
        entry = await controller.submit_entry()
        controller.teardown()
    """

    def __init__(
        self,
        backend: PatientBackend,
        patient_id: str | None,
        diagnoses: Iterable[Diagnosis] = (),
    ):
        self._backend = backend
        self._lookup = (
            diagnoses if isinstance(diagnoses, DiagnosisLookup) else DiagnosisLookup(diagnoses)
        )
        self._listeners: list[StateListener] = []
        self._mounted = True

        patient_id = (patient_id or "").strip()
        self._state: RecordState | None
        if patient_id:
            self._state = LoadingState(patient_id=patient_id)
        else:
            logger.info("[CONTROLLER] Mounted without a patient id")
            self._state = ErrorState(message=NO_PATIENT_ID_MESSAGE)

    @classmethod
    async def mount(
        cls,
        backend: PatientBackend,
        patient_id: str | None,
        diagnoses: Iterable[Diagnosis] = (),
    ) -> PatientRecordController:
        """Create a controller and run the initial fetch."""
        controller = cls(backend, patient_id, diagnoses)
        await controller.load()
        return controller

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> RecordState | None:
        """Current snapshot, or ``None`` once the view is torn down."""
        return self._state

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def diagnoses(self) -> DiagnosisLookup:
        return self._lookup

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* on every state change.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: RecordState) -> None:
        previous = self._state.status if self._state is not None else None
        self._state = state
        if previous != state.status:
            logger.info(f"[CONTROLLER] {previous} -> {state.status}")
        for listener in list(self._listeners):
            listener(state)

    def _require_ready(self) -> ReadyState:
        state = self._state
        if not isinstance(state, ReadyState):
            status = state.status if state is not None else "torn down"
            raise ControllerStateError(f"Operation requires a loaded patient (state: {status})")
        return state

    def _update_ready(self, **changes: Any) -> ReadyState:
        state = self._require_ready().model_copy(update=changes)
        self._set_state(state)
        return state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> RecordState | None:
        """Fetch the patient.  Only acts in the Loading state."""
        state = self._state
        if not isinstance(state, LoadingState):
            return state

        try:
            patient = await self._backend.get_patient(state.patient_id)
        except BackendError as e:
            if not self._mounted:
                logger.info("[CONTROLLER] Discarding fetch failure after teardown")
                return None
            logger.warning(f"[CONTROLLER] Fetch of patient {state.patient_id} failed: {e}")
            self._set_state(ErrorState(message=FETCH_FAILED_MESSAGE))
            return self._state

        if not self._mounted:
            logger.info(f"[CONTROLLER] Discarding patient {patient.id} fetched after teardown")
            return None

        self._set_state(ReadyState(patient=patient))
        return self._state

    def teardown(self) -> None:
        """Release held state; late-resolving operations become no-ops."""
        self._mounted = False
        self._listeners.clear()
        self._state = None
        logger.info("[CONTROLLER] Torn down")

    # ------------------------------------------------------------------
    # Add-entry form
    # ------------------------------------------------------------------

    def open_form(self) -> ReadyState:
        return self._update_ready(form_open=True)

    def close_form(self) -> ReadyState:
        """Hide the form and clear any add-entry error."""
        return self._update_ready(form_open=False, entry_error=None, entry_error_field=None)

    def toggle_form(self) -> ReadyState:
        if self._require_ready().form_open:
            return self.close_form()
        return self.open_form()

    def select_kind(self, kind: EntryKind) -> ReadyState:
        """Switch the form to another entry kind, keeping the shared fields."""
        state = self._require_ready()
        if state.form.kind == kind:
            return state
        return self._update_ready(form=blank_form(kind, carry_over=state.form))

    def edit_form(self, **values: Any) -> ReadyState:
        """Update draft form fields by attribute name (e.g. ``employer_name``).

        Raises:
            ValueError: If a name is not a field of the current form kind, or
                a value has the wrong type (text fields take ``str``,
                ``diagnosis_codes`` takes a list of ``str``).
        """
        state = self._require_ready()
        form_type = type(state.form)
        unknown = set(values) - set(form_type.model_fields)
        if unknown or "kind" in values:
            raise ValueError(
                f"Not a {state.form.kind} form field: {', '.join(sorted(unknown or {'kind'}))}"
            )
        try:
            form = form_type.model_validate({**state.form.model_dump(), **values})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}" for error in e.errors()
            )
            raise ValueError(f"Invalid {state.form.kind} form value: {problems}") from None
        return self._update_ready(form=form)

    async def submit_entry(self, form: EntryForm | None = None) -> Entry | None:
        """Validate and append a new entry.

        Uses *form* if given, otherwise the current draft.  On success the
        returned entry is appended to the in-memory record and the form is
        closed and reset.  On failure the record is unchanged, the error is
        kept on the state and the form stays open.

        Returns:
            The stored entry, or ``None`` if nothing was added.
        """
        state = self._require_ready()
        if state.submitting:
            logger.warning("[CONTROLLER] Submission ignored: an entry is already being added")
            return None

        form = form if form is not None else state.form
        try:
            payload = build_entry(form)
        except EntryFormError as e:
            logger.debug(f"[CONTROLLER] Entry form invalid: {e!r}")
            self._update_ready(
                form=form, form_open=True, entry_error=e.message, entry_error_field=e.field
            )
            return None

        self._update_ready(form=form, submitting=True)
        try:
            entry = await self._backend.append_entry(state.patient.id, payload)
        except BackendError as e:
            if not self._mounted:
                logger.info("[CONTROLLER] Discarding append failure after teardown")
                return None
            message = e.message if isinstance(e, EntryRejectedError) and e.message else SUBMIT_FAILED_MESSAGE
            logger.warning(f"[CONTROLLER] Append to {state.patient.id} failed: {e}")
            self._update_ready(
                submitting=False, form_open=True, entry_error=message, entry_error_field=None
            )
            return None
        else:
            if not self._mounted:
                logger.info(f"[CONTROLLER] Discarding entry {entry.id} appended after teardown")
                return None

            current = self._require_ready()
            self._update_ready(
                patient=current.patient.with_entry(entry),
                form=blank_form(form.kind),
                form_open=False,
                entry_error=None,
                entry_error_field=None,
                submitting=False,
            )
            logger.info(f"[CONTROLLER] Added {entry.kind} entry {entry.id} to {current.patient.id}")
            return entry
        finally:
            # Unexpected errors and cancellation must not leave the form locked
            self._release_submit()

    def _release_submit(self) -> None:
        state = self._state
        if self._mounted and isinstance(state, ReadyState) and state.submitting:
            self._set_state(state.model_copy(update={"submitting": False}))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> PatientView:
        """Render the loaded patient and its entries."""
        return render_patient(self._require_ready().patient, self._lookup)
