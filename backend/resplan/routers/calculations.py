"""Effort and cost calculation API routes."""
from fastapi import APIRouter

from resplan.defaults import default_complexity
from resplan.engine.calendar import months_between
from resplan.engine.effort import EffortCostModel
from resplan.engine.recalculate import recalculate_allocations
from resplan.models.allocation import Allocation
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

router = APIRouter(prefix="/calculations", tags=["calculations"])


def _catalog(data):
    """Request complexity settings; the default catalog only when none were sent."""
    return default_complexity() if data.complexity_settings is None else data.complexity_settings


@router.post("/effort", response_model=EffortBreakdown)
async def get_effort(data: EffortRequest):
    model = EffortCostModel()
    return model.selective_effort(
        data.category,
        data.complexity,
        data.task_template,
        _catalog(data),
        data.tier_level,
    )


@router.post("/cost", response_model=CostEstimate)
async def get_cost(data: CostRequest):
    model = EffortCostModel()
    return model.project_cost(
        data.complexity,
        data.resource,
        _catalog(data),
        data.resource_costs,
        tier_level=data.tier_level,
        allocation_percentage=data.allocation_percentage,
        category=data.category,
        task_template=data.task_template,
    )


@router.post("/cost-breakdown", response_model=DetailedCostBreakdown)
async def get_cost_breakdown(data: CostRequest):
    model = EffortCostModel()
    return model.detailed_cost_breakdown(
        data.complexity,
        data.resource,
        _catalog(data),
        data.resource_costs,
        tier_level=data.tier_level,
        allocation_percentage=data.allocation_percentage,
        category=data.category,
        task_template=data.task_template,
    )


@router.post("/three-point", response_model=ThreePointEstimate)
async def get_three_point(data: ThreePointRequest):
    model = EffortCostModel()
    return model.three_point_estimate(data.complexity, _catalog(data))


@router.post("/monthly-cost", response_model=MonthlyCostResponse)
async def get_monthly_cost(data: MonthlyCostRequest):
    model = EffortCostModel()
    return MonthlyCostResponse(
        project_cost=data.project_cost,
        months=max(1, months_between(data.start_date, data.end_date)),
        monthly_cost=model.monthly_cost(data.project_cost, data.start_date, data.end_date),
    )


@router.post("/recalculate", response_model=list[Allocation])
async def recalculate(data: RecalculateRequest):
    return recalculate_allocations(
        data.allocations,
        _catalog(data),
        data.resource_costs,
        task_templates=data.task_templates,
        holidays=data.holidays,
        leaves=data.leaves,
        members=data.members,
        model=EffortCostModel(),
    )
