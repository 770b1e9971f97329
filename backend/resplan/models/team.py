"""Team member and resource cost records."""
from decimal import Decimal

from pydantic import BaseModel, Field


class ResourceCostTier(BaseModel):
    """Hourly cost for a resource. Looked up by id, then by name."""

    id: str | None = None
    resource_name: str = ""
    per_hour_cost: Decimal = Field(default=0, ge=0)
    monthly_cost: Decimal | None = Field(None, ge=0)
    level: int | None = Field(None, ge=1, le=5)
    currency: str | None = None


class TeamMember(BaseModel):
    id: str | None = None
    name: str = Field(..., min_length=1)
    type: str | None = None
    tier_level: int = Field(default=2, ge=1, le=5)
    max_capacity: Decimal = Field(default=Decimal("1.0"), gt=0)
    # None means the engine default applies
    over_allocation_threshold: Decimal | None = Field(None, gt=0)
    max_hours_per_week: int = Field(default=40, ge=0)
    # Resource cost record id; the member name is used when unset
    cost_tier_id: str | None = None
    is_active: bool = True
    skills: list[str] = []

    def matches(self, ref: str | None) -> bool:
        """True when ref is this member's id or (case-insensitive) name."""
        if not ref:
            return False
        if ref == self.id or ref == self.name:
            return True
        return ref.lower() == self.name.lower()
