"""
Pure transitions over the dashboard's patient list.

Each function takes an immutable snapshot and returns a new one, keeping
one entry per id with the most recent known fields.
"""

from typing import Dict, Iterable, Tuple

from patient_portal.features.patients.schemas import Patient


PatientList = Tuple[Patient, ...]


def replace_all(patients: Iterable[Patient]) -> PatientList:
    """Snapshot of a freshly loaded list. A repeated id keeps its first position and last fields."""
    by_id: Dict[int, Patient] = {}
    for patient in patients:
        by_id[patient.id] = patient
    return tuple(by_id.values())


def append(snapshot: PatientList, patient: Patient) -> PatientList:
    """Add a created patient at the end, or refresh it in place if already listed."""
    if any(p.id == patient.id for p in snapshot):
        return replace(snapshot, patient)
    return snapshot + (patient,)


def replace(snapshot: PatientList, patient: Patient) -> PatientList:
    """Swap in an updated patient, preserving its position."""
    if not any(p.id == patient.id for p in snapshot):
        return snapshot + (patient,)
    return tuple(patient if p.id == patient.id else p for p in snapshot)


def remove(snapshot: PatientList, patient_id: int) -> PatientList:
    return tuple(p for p in snapshot if p.id != patient_id)
