"""Complexity level and task template records."""
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Mapping

from pydantic import BaseModel, Field


class Category(str, PyEnum):
    PROJECT = "Project"
    SUPPORT = "Support"
    MAINTENANCE = "Maintenance"
    TERMINAL = "Terminal"


class ComplexityLevel(BaseModel):
    """Complexity configuration. Legacy rows carry only days/hours."""

    level: str = Field(..., min_length=1)
    label: str | None = None
    days: Decimal = Field(default=0, ge=0)
    hours: Decimal = Field(default=0, ge=0)
    base_effort_hours: Decimal | None = Field(None, ge=0)
    complexity_multiplier: Decimal | None = None
    risk_factor: Decimal | None = None
    skill_sensitivity: Decimal | None = None
    # Multi-factor scoring
    technical_complexity: int | None = None
    business_complexity: int | None = None
    integration_points: int | None = None
    unknown_requirements: Decimal | None = None


class TaskEstimate(BaseModel):
    days: Decimal = Field(default=0, ge=0)
    hours: Decimal = Field(default=0, ge=0)
    # Share of a member's time the task takes at this level
    percentage: Decimal | None = Field(None, ge=0)


class TaskTemplate(BaseModel):
    """Flat per-complexity estimates for Support/Maintenance work."""

    id: str | None = None
    name: str
    category: str | None = None
    estimates: dict[str, TaskEstimate] = {}


def is_project_category(task_or_category) -> bool:
    """True for Project work, the only category sized by the complexity model.

    Accepts a Category, a plain string, or any object with a ``category`` attribute.
    """
    value = getattr(task_or_category, "category", task_or_category)
    value = getattr(value, "value", value)
    return isinstance(value, str) and value.strip().lower() == Category.PROJECT.value.lower()


def get_complexity_config(
    level: str | None,
    complexity_settings: Mapping[str, ComplexityLevel],
) -> ComplexityLevel | None:
    """Case-insensitive lookup; None when the level is not configured."""
    if not level:
        return None
    key = level.strip().lower()
    if key in complexity_settings:
        return complexity_settings[key]
    for k, v in complexity_settings.items():
        if k.lower() == key:
            return v
    return None
