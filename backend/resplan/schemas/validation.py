"""Pre-allocation check schemas."""
from typing import Any

from pydantic import BaseModel

from resplan.schemas.capacity import Severity


class CheckResult(BaseModel):
    type: str
    is_valid: bool = True
    severity: Severity = Severity.INFO
    message: str
    conflicts: list[dict[str, Any]] = []
    recommendations: list[str] = []
    details: dict[str, Any] = {}


class PreAllocationReport(BaseModel):
    is_valid: bool
    overall_risk: str
    final_recommendation: str
    checks: list[CheckResult]
    recommendations: list[str] = []
