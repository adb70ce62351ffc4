"""
Health Record Models
Health record rows and the alerts derived from them.
"""

import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from farm_dashboard.insights.utils import parse_date, safe_get
from farm_dashboard.models.base import StoreRecord, TimestampedRecord, parse_timestamp


class HealthRecordType(str, Enum):
    """Kinds of entries in the ``health_records`` table."""
    CHECKUP = "checkup"
    VACCINATION = "vaccination"
    TREATMENT = "treatment"
    ILLNESS = "illness"
    OTHER = "other"


# Record types surfaced as alerts
ALERT_RECORD_TYPES = (HealthRecordType.ILLNESS, HealthRecordType.CHECKUP)


class HealthRecord(TimestampedRecord):
    """Row from the ``health_records`` table."""

    sheep_id: Optional[str] = None
    record_type: str = HealthRecordType.OTHER.value
    description: str = ""
    date: Optional[datetime.date] = None
    created_by: Optional[str] = None

    @field_validator("sheep_id", "created_by", mode="before")
    @classmethod
    def _optional_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any):
        return parse_date(value)


class HealthAlert(StoreRecord):
    """
    Alert view over an illness or checkup health record.

    Not stored anywhere; built from ``health_records`` joined with the
    animal's ear tag and breed.
    """

    sheep_id: Optional[str] = None
    alert_type: str
    severity: str
    message: str = ""
    created_at: Optional[datetime.datetime] = None
    ear_tag: Optional[str] = None
    breed: Optional[str] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value: Any):
        return parse_timestamp(value)

    @classmethod
    def from_health_record(cls, row: dict[str, Any]) -> "HealthAlert":
        """Build an alert from a health record row with embedded sheep."""
        sheep = row.get("sheep") or {}
        if isinstance(sheep, list):
            sheep = sheep[0] if sheep else {}

        record_type = row.get("record_type") or ""
        return cls.model_validate({
            "id": row.get("id"),
            "sheep_id": None if row.get("sheep_id") is None else str(row.get("sheep_id")),
            "alert_type": record_type,
            "severity": "high" if record_type == HealthRecordType.ILLNESS.value else "medium",
            "message": row.get("description") or "",
            "created_at": row.get("created_at"),
            "ear_tag": safe_get(sheep, "ear_tag"),
            "breed": safe_get(sheep, "breed"),
        })
