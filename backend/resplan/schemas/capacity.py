"""Capacity and allocation validation result schemas."""
import datetime as dt
from decimal import Decimal
from enum import Enum as PyEnum

from pydantic import BaseModel, Field

from resplan.models.allocation import Allocation, AllocationRequest
from resplan.models.calendar import DateRange, LeaveRecord
from resplan.models.team import TeamMember


class Severity(str, PyEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationIssue(BaseModel):
    severity: Severity
    code: str
    message: str


class AllocationShare(BaseModel):
    """One active allocation's contribution to a member's utilization."""

    allocation_id: str
    project_name: str | None = None
    task_name: str | None = None
    allocation_percentage: Decimal
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    category: str | None = None
    complexity: str | None = None


class UtilizationResult(BaseModel):
    resource_name: str
    resource_id: str | None = None
    current_utilization: Decimal = Decimal(0)
    utilization_percentage: Decimal = Decimal(0)
    max_capacity: Decimal = Decimal(0)
    active_allocations: list[AllocationShare] = []
    error: str | None = None


class OverAllocationResult(BaseModel):
    is_over_allocated: bool = False
    resource_name: str
    current_utilization: Decimal = Decimal(0)
    max_capacity: Decimal = Decimal(0)
    over_allocation_threshold: Decimal = Decimal(0)
    over_allocation_amount: Decimal = Decimal(0)
    conflicting_allocations: list[str] = []
    error: str | None = None


class AllocationConflict(BaseModel):
    allocation_id: str
    project_name: str | None = None
    allocation_percentage: Decimal
    conflict: str = "capacity_overlap"


class AllocationValidation(BaseModel):
    is_valid: bool = True
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    conflicts: list[AllocationConflict] = []
    recommendations: list[str] = []
    current_utilization: Decimal = Decimal(0)
    projected_utilization: Decimal = Decimal(0)
    over_allocation_threshold: Decimal | None = None


class AvailabilityResult(BaseModel):
    available: bool = False
    resource_name: str
    current_utilization: Decimal = Decimal(0)
    max_capacity: Decimal = Decimal(0)
    over_allocation_threshold: Decimal = Decimal(0)
    available_capacity: Decimal = Decimal(0)
    available_percentage: Decimal = Decimal(0)
    status: str | None = None
    active_allocations_count: int = 0
    error: str | None = None


class UtilizationSummaryEntry(BaseModel):
    resource_id: str | None
    resource_name: str
    resource_type: str | None
    current_utilization: Decimal
    utilization_percentage: Decimal
    max_capacity: Decimal
    is_over_allocated: bool
    over_allocation_amount: Decimal
    active_allocations_count: int
    status: str
    load_state: str


class PhaseSpan(BaseModel):
    is_valid: bool
    is_completed: bool = False
    is_projected: bool = False
    days: int = 0
    hours: int = 0
    start_phase: str | None = None
    end_phase: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    message: str | None = None
    error: str | None = None


class CapacitySnapshot(BaseModel):
    """Caller-owned members and allocations the engine reads."""

    members: list[TeamMember] = []
    allocations: list[Allocation] = []
    default_threshold: Decimal | None = Field(None, gt=0)


class ResourceQuery(CapacitySnapshot):
    resource: str
    date_range: DateRange | None = None


class OverAllocationQuery(CapacitySnapshot):
    resource: str
    threshold: Decimal | None = Field(None, gt=0)


class AllocationCheckRequest(CapacitySnapshot):
    request: AllocationRequest
    strict_enforcement: bool | None = None
    leaves: list[LeaveRecord] = []
