"""Allocation records. The caller owns the collection; the engine only reads it."""
import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field


class AllocationPlan(BaseModel):
    task_start: dt.date | None = None
    task_end: dt.date | None = None
    cost_project: Decimal | None = None
    cost_monthly: Decimal | None = None


class AllocationActual(BaseModel):
    task_start: dt.date | None = None
    task_end: dt.date | None = None
    cost_project: Decimal | None = None


class AllocationVariance(BaseModel):
    days: Decimal | None = None
    cost: Decimal | None = None


class Allocation(BaseModel):
    id: str
    resource: str
    category: str | None = None
    complexity: str | None = None
    allocation_percentage: Decimal | None = None
    # Legacy share field, read when allocation_percentage is absent
    workload: Decimal | None = None
    task_name: str | None = None
    status: str | None = None
    phase: str | None = None
    project_name: str | None = None
    plan: AllocationPlan = Field(default_factory=AllocationPlan)
    actual: AllocationActual = Field(default_factory=AllocationActual)
    variance: AllocationVariance = Field(default_factory=AllocationVariance)

    @property
    def share(self) -> Decimal:
        """Fraction of the member's time this allocation takes (1.0 when unset)."""
        if self.allocation_percentage is not None:
            return self.allocation_percentage
        if self.workload is not None:
            return self.workload
        return Decimal("1.0")


class AllocationRequest(BaseModel):
    """A proposed allocation, validated before the caller stores it."""

    resource: str
    allocation_percentage: Decimal | None = None
    workload: Decimal | None = None
    category: str | None = None
    complexity: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    project_name: str | None = None

    @property
    def share(self) -> Decimal:
        if self.allocation_percentage is not None:
            return self.allocation_percentage
        if self.workload is not None:
            return self.workload
        return Decimal("1.0")
