"""
Base Record Module
Defines the common base and timestamp fields for all store records.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp, returning None for missing or malformed values."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


class StoreRecord(BaseModel):
    """
    Base class for records read from the data store.

    Features:
        - Unknown columns are ignored
        - Ids are always strings (uuid or integer keys)
        - Flat dict conversion for export
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    def to_row(self) -> dict[str, Any]:
        """
        Convert record to a flat dictionary of scalars.
        Dates become ISO strings and enums their values.
        """
        result = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, Enum):
                value = value.value
            result[name] = value
        return result


class TimestampedRecord(StoreRecord):
    """
    Record with created_at / updated_at columns.

    Usage:
        class Animal(TimestampedRecord):
            ...
    """

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_timestamps(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)
