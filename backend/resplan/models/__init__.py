"""Domain input records supplied by callers."""
from resplan.models.allocation import (
    Allocation,
    AllocationActual,
    AllocationPlan,
    AllocationRequest,
    AllocationVariance,
)
from resplan.models.calendar import DateRange, Holiday, HolidayType, LeaveRecord, LeaveType
from resplan.models.complexity import (
    Category,
    ComplexityLevel,
    TaskEstimate,
    TaskTemplate,
    get_complexity_config,
    is_project_category,
)
from resplan.models.team import ResourceCostTier, TeamMember

__all__ = [
    "Allocation",
    "AllocationActual",
    "AllocationPlan",
    "AllocationRequest",
    "AllocationVariance",
    "Category",
    "ComplexityLevel",
    "DateRange",
    "Holiday",
    "HolidayType",
    "LeaveRecord",
    "LeaveType",
    "ResourceCostTier",
    "TaskEstimate",
    "TaskTemplate",
    "TeamMember",
    "get_complexity_config",
    "is_project_category",
]
