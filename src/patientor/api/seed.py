"""Seed the patient store with demo patients and diagnosis codes.

Usage:
    uv run python -m patientor.api.seed

    # Into a specific directory, replacing what is there
    uv run python -m patientor.api.seed --data-dir data/patientor --clean
"""

from __future__ import annotations

import argparse
import asyncio
import shutil
from pathlib import Path

from pydantic import TypeAdapter

from ..models import Diagnosis, NewEntry, NewPatient
from .store import PatientJsonStore

DIAGNOSES: list[dict] = [
    {"code": "M24.2", "name": "Disorder of ligament", "latin": "Morbositas ligamenti"},
    {"code": "M51.2", "name": "Other specified intervertebral disc displacement", "latin": "Alia dislocatio disci intervertebralis specificata"},
    {"code": "S03.5", "name": "Sprain and strain of joints and ligaments of other and unspecified parts of head", "latin": "Distorsio et/sive distensio articulationum et/sive ligamentorum partium aliarum sive non specificatarum capitis"},
    {"code": "J10.1", "name": "Influenza with other respiratory manifestations, other influenza virus codeidentified", "latin": "Influenza cum aliis manifestationibus respiratoriis ab agente virali identificato"},
    {"code": "J06.9", "name": "Acute upper respiratory infection, unspecified", "latin": "Infectio acuta respiratoria superior non specificata"},
    {"code": "Z57.1", "name": "Occupational exposure to radiation"},
    {"code": "N30.0", "name": "Acute cystitis", "latin": "Cystitis acuta"},
    {"code": "H54.7", "name": "Unspecified visual loss", "latin": "Amblyopia NAS"},
    {"code": "J03.0", "name": "Streptococcal tonsillitis", "latin": "Tonsillitis (palatina) streptococcica"},
    {"code": "L60.1", "name": "Onycholysis", "latin": "Onycholysis"},
    {"code": "Z74.3", "name": "Need for continuous supervision"},
    {"code": "L20", "name": "Atopic dermatitis", "latin": "Atopic dermatitis"},
    {"code": "F43.2", "name": "Adjustment disorders", "latin": "Perturbationes adaptationis"},
    {"code": "S62.5", "name": "Fracture of thumb", "latin": "Fractura [ossis] pollicis"},
    {"code": "H35.29", "name": "Other proliferative retinopathy", "latin": "Alia retinopathia proliferativa"},
]

# (patient id, patient details, entries in chronological order)
PATIENTS: list[tuple[str, dict, list[dict]]] = [
    (
        "d2773336-f723-11e9-8f0b-362b9e155667",
        {
            "name": "John McClane",
            "dateOfBirth": "1986-07-09",
            "ssn": "090786-122X",
            "gender": "male",
            "occupation": "New york city cop",
        },
        [
            {
                "kind": "Hospital",
                "date": "2015-01-02",
                "specialist": "MD House",
                "diagnosisCodes": ["S62.5"],
                "description": "Healing time appr. 2 weeks. patient doesn't remember how he got the injury.",
                "discharge": {"date": "2015-01-16", "criteria": "Thumb has healed."},
            },
        ],
    ),
    (
        "d2773598-f723-11e9-8f0b-362b9e155667",
        {
            "name": "Martin Riggs",
            "dateOfBirth": "1979-01-30",
            "ssn": "300179-77A",
            "gender": "male",
            "occupation": "Cop",
        },
        [
            {
                "kind": "OccupationalHealthcare",
                "date": "2019-08-05",
                "specialist": "MD House",
                "employerName": "HyPD",
                "diagnosisCodes": ["Z57.1", "Z74.3", "M51.2"],
                "description": "Patient mistakenly found himself in a nuclear plant waste site without protection gear. Very minor radiation poisoning.",
                "sickLeave": {"startDate": "2019-08-05", "endDate": "2019-08-28"},
            },
        ],
    ),
    (
        "d27736ec-f723-11e9-8f0b-362b9e155667",
        {
            "name": "Hans Gruber",
            "dateOfBirth": "1970-04-25",
            "ssn": "250470-555L",
            "gender": "other",
            "occupation": "Technician",
        },
        [],
    ),
    (
        "d2773822-f723-11e9-8f0b-362b9e155667",
        {
            "name": "Dana Scully",
            "dateOfBirth": "1974-01-05",
            "ssn": "050174-432N",
            "gender": "female",
            "occupation": "Forensic Pathologist",
        },
        [
            {
                "kind": "HealthCheck",
                "date": "2018-10-05",
                "specialist": "MD House",
                "description": "Yearly control visit. Due to high cholesterol levels recommended to eat more vegetables.",
                "healthCheckRating": 1,
            },
            {
                "kind": "OccupationalHealthcare",
                "date": "2019-09-10",
                "specialist": "MD House",
                "employerName": "FBI",
                "description": "Prescriptions renewed.",
            },
            {
                "kind": "HealthCheck",
                "date": "2019-10-20",
                "specialist": "MD House",
                "description": "Yearly control visit. Cholesterol levels back to normal.",
                "healthCheckRating": 0,
            },
        ],
    ),
    (
        "d2773c6e-f723-11e9-8f0b-362b9e155667",
        {
            "name": "Matti Luukkainen",
            "dateOfBirth": "1971-04-09",
            "ssn": "090471-8890",
            "gender": "male",
            "occupation": "Digital evangelist",
        },
        [
            {
                "kind": "HealthCheck",
                "date": "2019-05-01",
                "specialist": "Dr Byte House",
                "description": "Digital overdose, very bytestatic. Otherwise healthy.",
                "diagnosisCodes": ["F43.2"],
                "healthCheckRating": 0,
            },
        ],
    ),
]

_NEW_ENTRY_ADAPTER: TypeAdapter[NewEntry] = TypeAdapter(NewEntry)


async def seed_store(store: PatientJsonStore) -> dict[str, int]:
    """Load the demo data into *store*.  Returns counts per resource."""
    await store.set_diagnoses([Diagnosis.model_validate(d) for d in DIAGNOSES])

    entries = 0
    for patient_id, details, raw_entries in PATIENTS:
        await store.add_patient(NewPatient.model_validate(details), patient_id=patient_id)
        for raw in raw_entries:
            await store.add_entry(patient_id, _NEW_ENTRY_ADAPTER.validate_python(raw))
            entries += 1

    return {"diagnoses": len(DIAGNOSES), "patients": len(PATIENTS), "entries": entries}


def seed(data_dir: str | Path, clean: bool = False) -> dict[str, int]:
    """Seed the JSON store under *data_dir*."""
    data_dir = Path(data_dir)
    if clean and data_dir.exists():
        shutil.rmtree(data_dir)
    store = PatientJsonStore(data_dir)
    return asyncio.run(seed_store(store))


if __name__ == "__main__":
    from .config import get_config

    parser = argparse.ArgumentParser(
        description="Seed the local patient store with demo data",
    )
    parser.add_argument(
        "--data-dir", type=str, default=None,
        help="Target directory for patient files (default: PATIENTOR_DATA_DIR)",
    )
    parser.add_argument(
        "--clean", action="store_true",
        help="Remove all existing data before seeding",
    )
    args = parser.parse_args()

    stats = seed(args.data_dir or get_config().data_dir or "data/patientor", clean=args.clean)
    for name, count in stats.items():
        print(f"  {name}: {count}")
