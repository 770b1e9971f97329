"""Calendar request/response schemas."""
import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from resplan.models.calendar import Holiday, LeaveRecord
from resplan.models.complexity import ComplexityLevel


class PlanEndDateRequest(BaseModel):
    start_date: dt.date
    complexity: str
    resource_name: str
    category: str = "Project"
    holidays: list[Holiday] = []
    leaves: list[LeaveRecord] = []
    # None means the default catalog
    complexity_settings: dict[str, ComplexityLevel] | None = None
    capacity_factor: Decimal | None = Field(None, gt=0)
    include_collective_holidays: bool = True


class PlanEndDateResponse(BaseModel):
    start_date: dt.date
    end_date: dt.date
    calendar_days: int


class BusinessDaysRequest(BaseModel):
    start_date: dt.date
    end_date: dt.date
    holidays: list[dt.date] = []
    capacity_factor: Decimal | None = Field(None, gt=0)


class BusinessDaysResponse(BaseModel):
    business_days: int
    effective_workdays: int
