"""
ClinicDesk: multi-clinic front desk queue and doctor workflow service

Receptionists queue patients, doctors take them into consultation and
record medical details, optionally dictated and transcribed. Each clinic's
data lives under its own prefix in a Redis-protocol key-value store.
"""

__version__ = "0.1.0"
__author__ = "ClinicDesk Team"
__description__ = "Multi-clinic front desk queue and doctor workflow service"
