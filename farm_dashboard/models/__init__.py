"""
Models Package
Typed records for rows read from the Supabase tables.
"""

from farm_dashboard.models.animal import Animal, Gender, HealthStatus, VaccinationStatus
from farm_dashboard.models.health import (
    ALERT_RECORD_TYPES,
    HealthAlert,
    HealthRecord,
    HealthRecordType,
)
from farm_dashboard.models.ledger import DebtCreditRecord, LedgerStatus, LedgerType
from farm_dashboard.models.transaction import SALE_CATEGORY, Transaction, TransactionKind
from farm_dashboard.models.user import ROLE_ALIASES, Role, UserProfile, normalize_role

__all__ = [
    "Animal",
    "Gender",
    "HealthStatus",
    "VaccinationStatus",
    "ALERT_RECORD_TYPES",
    "HealthAlert",
    "HealthRecord",
    "HealthRecordType",
    "DebtCreditRecord",
    "LedgerStatus",
    "LedgerType",
    "SALE_CATEGORY",
    "Transaction",
    "TransactionKind",
    "ROLE_ALIASES",
    "Role",
    "UserProfile",
    "normalize_role",
]
