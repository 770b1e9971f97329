"""Calendar API routes."""
from fastapi import APIRouter

from resplan.defaults import default_complexity
from resplan.engine.calendar import (
    count_business_days,
    effective_workdays,
    plan_end_date,
    planned_effort_days,
    realistic_duration,
)
from resplan.schemas.calendar import (
    BusinessDaysRequest,
    BusinessDaysResponse,
    PlanEndDateRequest,
    PlanEndDateResponse,
)

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.post("/plan-end-date", response_model=PlanEndDateResponse)
async def get_plan_end_date(data: PlanEndDateRequest):
    settings = default_complexity() if data.complexity_settings is None else data.complexity_settings
    end = plan_end_date(
        data.start_date,
        data.complexity,
        data.resource_name,
        data.holidays,
        data.leaves,
        settings,
        category=data.category,
        capacity_factor=data.capacity_factor,
        include_collective_holidays=data.include_collective_holidays,
    )
    effort_days = planned_effort_days(data.complexity, settings, data.category)
    return PlanEndDateResponse(
        start_date=data.start_date,
        end_date=end,
        calendar_days=realistic_duration(effort_days, data.capacity_factor),
    )


@router.post("/business-days", response_model=BusinessDaysResponse)
async def get_business_days(data: BusinessDaysRequest):
    return BusinessDaysResponse(
        business_days=count_business_days(data.start_date, data.end_date, data.holidays),
        effective_workdays=effective_workdays(
            data.start_date, data.end_date, data.holidays, data.capacity_factor
        ),
    )
