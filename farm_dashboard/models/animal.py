"""
Animal Model
Represents one sheep in the flock inventory.
"""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from farm_dashboard.insights.utils import parse_date, safe_float
from farm_dashboard.models.base import TimestampedRecord


class HealthStatus(str, Enum):
    """Current health state of an animal."""
    HEALTHY = "healthy"
    SICK = "sick"
    RECOVERING = "recovering"
    PREGNANT = "pregnant"


class VaccinationStatus(str, Enum):
    """Vaccination schedule state."""
    UP_TO_DATE = "up_to_date"
    DUE = "due"
    OVERDUE = "overdue"


class Gender(str, Enum):
    """Animal sex."""
    FEMALE = "female"
    MALE = "male"


class Animal(TimestampedRecord):
    """
    Sheep record from the ``sheep`` table.

    Attributes:
        id: Unique identifier
        ear_tag: Ear tag (unique display key)
        breed: Breed name, if recorded
        birth_date: Date of birth, if known
        gender: female or male
        weight: Weight in kg, if measured
        health_status: healthy, sick, recovering or pregnant
        vaccination_status: up_to_date, due or overdue
        estimated_value: Estimated market value
        created_by: Id of the user who created the record

    A missing weight or birth date is not an error; it lowers the
    confidence of the health score instead.
    """

    ear_tag: str = ""
    breed: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    weight: Optional[float] = None
    health_status: HealthStatus = HealthStatus.HEALTHY
    vaccination_status: VaccinationStatus = VaccinationStatus.UP_TO_DATE
    estimated_value: float = 0.0
    notes: Optional[str] = None
    mother_id: Optional[str] = None
    father_id: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator("ear_tag", mode="before")
    @classmethod
    def _ear_tag_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("birth_date", mode="before")
    @classmethod
    def _parse_birth_date(cls, value: Any) -> Optional[date]:
        return parse_date(value)

    @field_validator("weight", mode="before")
    @classmethod
    def _parse_weight(cls, value: Any) -> Optional[float]:
        return safe_float(value, None)

    @field_validator("estimated_value", mode="before")
    @classmethod
    def _parse_value(cls, value: Any) -> float:
        return safe_float(value, 0.0)

    @field_validator("health_status", "vaccination_status", mode="before")
    @classmethod
    def _status_default(cls, value: Any, info) -> Any:
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("mother_id", "father_id", "created_by", mode="before")
    @classmethod
    def _optional_id(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @property
    def has_complete_health_data(self) -> bool:
        """True when both weight and birth date are recorded."""
        return self.weight is not None and self.birth_date is not None
