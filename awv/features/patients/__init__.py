# Patient Management Feature

from awv.features.patients.models import Patient
from awv.features.patients.router import router
from awv.features.patients.service import PatientService

__all__ = ["Patient", "router", "PatientService"]
