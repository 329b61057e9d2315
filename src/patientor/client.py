"""Async HTTP client for the patientor backend.

Routes (relative to the configured API URL, e.g. ``http://localhost:3001/api``):

- ``GET  /patients``              -> list of non-sensitive patients
- ``GET  /patients/{id}``         -> full patient record
- ``POST /patients/{id}/entries`` -> stored entry (400 with a message on rejection)
- ``GET  /diagnoses``             -> diagnosis code table
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from .config import get_config
from .errors import BackendError, EntryRejectedError, PatientNotFoundError
from .models import Diagnosis, Entry, NewEntry, NonSensitivePatient, Patient

logger = logging.getLogger(__name__)

_ENTRY_ADAPTER: TypeAdapter[Entry] = TypeAdapter(Entry)
_PATIENT_LIST_ADAPTER = TypeAdapter(list[NonSensitivePatient])
_DIAGNOSIS_LIST_ADAPTER = TypeAdapter(list[Diagnosis])


def _error_message(response: httpx.Response) -> str | None:
    """Pull a human-readable message out of an error response body."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None

    if isinstance(body, str):
        return body or None
    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class PatientsClient:
    """Async patientor backend client (implements ``PatientBackend``)."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        config = get_config()
        self._base_url = (base_url or config.api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else config.timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _request(self, method: str, path: str, json: dict | None = None) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            httpx.HTTPStatusError: On HTTP error statuses (callers map these)
            BackendError: On transport failures or a non-JSON body
        """
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    json=json,
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError:
            raise
        except httpx.HTTPError as e:
            logger.warning(f"[PATIENTS] {method} {url} failed: {type(e).__name__}: {e}")
            raise BackendError(f"Could not reach patient service: {e}") from e
        except ValueError as e:
            raise BackendError(f"Invalid response from patient service: {e}") from e

    @staticmethod
    def _status_error(e: httpx.HTTPStatusError, fallback: str) -> BackendError:
        status = e.response.status_code
        message = _error_message(e.response) or fallback
        logger.warning(f"[PATIENTS] HTTP {status}: {message}")
        return BackendError(message, status_code=status)

    async def get_patient(self, patient_id: str) -> Patient:
        """Fetch one patient with all entries."""
        try:
            data = await self._request("GET", f"/patients/{quote(patient_id, safe='')}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise PatientNotFoundError(
                    f"Patient {patient_id} not found", status_code=404
                ) from e
            raise self._status_error(e, "Could not fetch patient data") from e

        try:
            return Patient.model_validate(data)
        except ValidationError as e:
            raise BackendError(f"Malformed patient record for {patient_id}: {e}") from e

    async def append_entry(self, patient_id: str, payload: NewEntry) -> Entry:
        """POST a new entry; returns the stored entry."""
        try:
            data = await self._request(
                "POST", f"/patients/{quote(patient_id, safe='')}/entries", json=payload.to_wire()
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise PatientNotFoundError(
                    f"Patient {patient_id} not found", status_code=404
                ) from e
            if status in (400, 422):
                message = _error_message(e.response) or "Entry was rejected"
                logger.info(f"[PATIENTS] Entry rejected for {patient_id}: {message}")
                raise EntryRejectedError(message, status_code=status) from e
            raise self._status_error(e, "Could not add entry") from e

        try:
            return _ENTRY_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise BackendError(f"Malformed entry returned for {patient_id}: {e}") from e

    async def list_patients(self) -> list[NonSensitivePatient]:
        """List every patient without sensitive fields."""
        try:
            data = await self._request("GET", "/patients")
        except httpx.HTTPStatusError as e:
            raise self._status_error(e, "Could not list patients") from e
        try:
            return _PATIENT_LIST_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise BackendError(f"Malformed patient list: {e}") from e

    async def get_diagnoses(self) -> list[Diagnosis]:
        """Fetch the diagnosis code table."""
        try:
            data = await self._request("GET", "/diagnoses")
        except httpx.HTTPStatusError as e:
            raise self._status_error(e, "Could not fetch diagnoses") from e
        try:
            return _DIAGNOSIS_LIST_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise BackendError(f"Malformed diagnosis list: {e}") from e


# Global client instance
_client: PatientsClient | None = None


def get_client() -> PatientsClient:
    """Get or create the global patients client instance."""
    global _client
    if _client is None:
        _client = PatientsClient()
    return _client
