"""Capacity and allocation validation API routes."""
from fastapi import APIRouter

from resplan.engine.capacity import CapacityEngine
from resplan.engine.validation import AllocationValidator
from resplan.schemas.capacity import (
    AllocationCheckRequest,
    AllocationValidation,
    AvailabilityResult,
    CapacitySnapshot,
    OverAllocationQuery,
    OverAllocationResult,
    ResourceQuery,
    UtilizationResult,
    UtilizationSummaryEntry,
)
from resplan.schemas.validation import PreAllocationReport

router = APIRouter(prefix="/capacity", tags=["capacity"])


def _engine(data: CapacitySnapshot, strict_enforcement: bool | None = None) -> CapacityEngine:
    return CapacityEngine(default_threshold=data.default_threshold, strict_enforcement=strict_enforcement)


@router.post("/utilization", response_model=UtilizationResult)
async def get_utilization(data: ResourceQuery):
    return _engine(data).calculate_utilization(data.resource, data.allocations, data.members, data.date_range)


@router.post("/over-allocation", response_model=OverAllocationResult)
async def get_over_allocation(data: OverAllocationQuery):
    return _engine(data).detect_over_allocation(
        data.resource, data.allocations, data.members, threshold=data.threshold
    )


@router.post("/validate", response_model=AllocationValidation)
async def validate_allocation(data: AllocationCheckRequest):
    return _engine(data, data.strict_enforcement).validate_allocation(
        data.request, data.allocations, data.members
    )


@router.post("/availability", response_model=AvailabilityResult)
async def get_availability(data: ResourceQuery):
    return _engine(data).get_resource_availability(
        data.resource, data.allocations, data.members, data.date_range
    )


@router.post("/summary", response_model=list[UtilizationSummaryEntry])
async def get_summary(data: CapacitySnapshot):
    return _engine(data).get_utilization_summary(data.allocations, data.members)


@router.post("/pre-check", response_model=PreAllocationReport)
async def pre_check(data: AllocationCheckRequest):
    validator = AllocationValidator(_engine(data, data.strict_enforcement))
    return validator.validate(data.request, data.allocations, data.members, data.leaves)
