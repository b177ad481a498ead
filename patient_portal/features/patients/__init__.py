# Patient Management Feature

from patient_portal.features.patients.schemas import Patient
from patient_portal.features.patients.service import PatientService

__all__ = ["Patient", "PatientService"]
