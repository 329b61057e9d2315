"""Read-only diagnosis code lookup."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from .models import Diagnosis


class DiagnosisLookup(Mapping[str, Diagnosis]):
    """Immutable mapping from diagnosis code to :class:`Diagnosis`.

    Built once per view from the externally supplied diagnosis list.  Codes
    that reference nothing in the table are allowed; :meth:`name_for` returns
    ``None`` for them.
    """

    def __init__(self, diagnoses: Iterable[Diagnosis] = ()):
        # First occurrence wins if the supplied list repeats a code
        table: dict[str, Diagnosis] = {}
        for diagnosis in diagnoses:
            table.setdefault(diagnosis.code, diagnosis)
        self._table = MappingProxyType(table)

    def __getitem__(self, code: str) -> Diagnosis:
        return self._table[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def name_for(self, code: str) -> str | None:
        """Display name for *code*, or ``None`` if the code is unknown."""
        diagnosis = self._table.get(code)
        return diagnosis.name if diagnosis is not None else None

    def options(self) -> list[tuple[str, str]]:
        """``(code, "code name")`` pairs for a diagnosis multi-select."""
        return [(d.code, f"{d.code} {d.name}") for d in self._table.values()]
