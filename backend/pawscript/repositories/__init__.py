"""Read-side stores that services receive instead of a global database handle."""

from pawscript.repositories.base import RecordStoreError
from pawscript.repositories.discharges import DischargeStore, SqlDischargeStore
from pawscript.repositories.dose_records import DoseRecordStore, SqlDoseRecordStore

__all__ = [
    "DischargeStore",
    "DoseRecordStore",
    "RecordStoreError",
    "SqlDischargeStore",
    "SqlDoseRecordStore",
]
