"""Effort and cost schemas."""
import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from resplan.models.allocation import Allocation
from resplan.models.calendar import Holiday, LeaveRecord
from resplan.models.complexity import ComplexityLevel, TaskTemplate
from resplan.models.team import ResourceCostTier, TeamMember


class EffortBreakdown(BaseModel):
    base_hours: Decimal = Decimal(0)
    adjusted_hours: Decimal = Decimal(0)
    skill_multiplier: Decimal = Decimal("1.0")
    complexity_multiplier: Decimal = Decimal("1.0")
    risk_multiplier: Decimal = Decimal("1.0")
    after_complexity: Decimal = Decimal(0)
    after_risk: Decimal = Decimal(0)
    tier_level: int | None = None
    skill_sensitivity: Decimal | None = None
    method: str = "complexity"
    error: str | None = None


class CostEstimate(BaseModel):
    total_cost: Decimal = Decimal(0)
    effort_hours: Decimal = Decimal(0)
    duration_days: int = 0
    hourly_rate: Decimal = Decimal(0)
    allocation_percentage: Decimal = Decimal("1.0")
    method: str = "complexity"
    breakdown: EffortBreakdown = EffortBreakdown()
    error: str | None = None


class DurationEstimate(BaseModel):
    effort_hours: Decimal
    allocation_percentage: Decimal
    hours_per_day: Decimal
    duration_days: int


class CostComponents(BaseModel):
    base_effort_cost: Decimal
    skill_adjustment_cost: Decimal
    total_cost: Decimal
    hourly_rate: Decimal


class CostContext(BaseModel):
    complexity: str
    resource_name: str | None
    tier_level: int
    tier_label: str
    category: str | None
    method: str


class DetailedCostBreakdown(BaseModel):
    summary: CostEstimate
    effort_breakdown: EffortBreakdown
    duration_breakdown: DurationEstimate
    cost_breakdown: CostComponents
    context: CostContext


class ConfidenceInterval(BaseModel):
    low: int
    high: int


class ThreePointEstimate(BaseModel):
    optimistic: int = 0
    realistic: int = 0
    pessimistic: int = 0
    expected: int = 0
    standard_deviation: int = 0
    confidence_68: ConfidenceInterval = ConfidenceInterval(low=0, high=0)
    confidence_95: ConfidenceInterval = ConfidenceInterval(low=0, high=0)
    error: str | None = None


class BufferedValue(BaseModel):
    base: Decimal
    buffer: Decimal
    total: Decimal


class ConfigValidation(BaseModel):
    is_valid: bool
    errors: list[str] = []
    warnings: list[str] = []


class EffortRequest(BaseModel):
    complexity: str
    tier_level: int | None = Field(None, ge=1, le=5)
    category: str = "Project"
    task_template: TaskTemplate | None = None
    complexity_settings: dict[str, ComplexityLevel] | None = None


class CostRequest(EffortRequest):
    resource: str
    resource_costs: list[ResourceCostTier]
    allocation_percentage: Decimal | None = None


class ThreePointRequest(BaseModel):
    complexity: str
    complexity_settings: dict[str, ComplexityLevel] | None = None


class MonthlyCostRequest(BaseModel):
    project_cost: Decimal = Field(..., ge=0)
    start_date: dt.date
    end_date: dt.date


class MonthlyCostResponse(BaseModel):
    project_cost: Decimal
    months: int
    monthly_cost: Decimal


class RecalculateRequest(BaseModel):
    """Allocations to re-derive, with the reference data they depend on."""

    allocations: list[Allocation]
    resource_costs: list[ResourceCostTier] = []
    task_templates: list[TaskTemplate] = []
    holidays: list[Holiday] = []
    leaves: list[LeaveRecord] = []
    members: list[TeamMember] = []
    complexity_settings: dict[str, ComplexityLevel] | None = None
