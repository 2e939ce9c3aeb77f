"""
Domain entities package.
"""

from .clinic import Clinic
from .patient import MedicalDetails, Patient

__all__ = [
    "Clinic",
    "MedicalDetails",
    "Patient",
]
