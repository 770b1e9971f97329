"""Pydantic schemas."""
from resplan.schemas.calculation import (
    CostEstimate,
    CostRequest,
    DetailedCostBreakdown,
    EffortBreakdown,
    EffortRequest,
    MonthlyCostRequest,
    MonthlyCostResponse,
    RecalculateRequest,
    ThreePointEstimate,
    ThreePointRequest,
)
from resplan.schemas.calendar import (
    BusinessDaysRequest,
    BusinessDaysResponse,
    PlanEndDateRequest,
    PlanEndDateResponse,
)
from resplan.schemas.capacity import (
    AllocationCheckRequest,
    AllocationValidation,
    AvailabilityResult,
    CapacitySnapshot,
    OverAllocationQuery,
    OverAllocationResult,
    ResourceQuery,
    Severity,
    UtilizationResult,
    UtilizationSummaryEntry,
    ValidationIssue,
)
from resplan.schemas.validation import CheckResult, PreAllocationReport

__all__ = [
    "AllocationCheckRequest",
    "AllocationValidation",
    "AvailabilityResult",
    "BusinessDaysRequest",
    "BusinessDaysResponse",
    "CapacitySnapshot",
    "CheckResult",
    "CostEstimate",
    "CostRequest",
    "DetailedCostBreakdown",
    "EffortBreakdown",
    "EffortRequest",
    "MonthlyCostRequest",
    "MonthlyCostResponse",
    "RecalculateRequest",
    "OverAllocationQuery",
    "OverAllocationResult",
    "PlanEndDateRequest",
    "PlanEndDateResponse",
    "PreAllocationReport",
    "ResourceQuery",
    "Severity",
    "ThreePointEstimate",
    "ThreePointRequest",
    "UtilizationResult",
    "UtilizationSummaryEntry",
    "ValidationIssue",
]
