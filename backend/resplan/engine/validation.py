"""Pre-allocation checks: availability, tier fit, capacity limits and workload."""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from resplan.engine.capacity import CapacityEngine, find_member
from resplan.models.allocation import Allocation, AllocationRequest
from resplan.models.calendar import DateRange, LeaveRecord
from resplan.models.team import TeamMember
from resplan.schemas.capacity import Severity
from resplan.schemas.validation import CheckResult, PreAllocationReport

logger = logging.getLogger(__name__)

# Inclusive tier bounds suited to each complexity
OPTIMAL_TIER_RANGES: dict[str, tuple[int, int]] = {
    "low": (1, 3),
    "medium": (2, 4),
    "high": (3, 5),
    "sophisticated": (4, 5),
}
SIGNIFICANT_OVERAGE = Decimal("0.2")


def _not_found(check_type: str, resource_ref: str | None) -> CheckResult:
    return CheckResult(
        type=check_type,
        is_valid=False,
        severity=Severity.ERROR,
        message=f"Resource not found: {resource_ref}",
    )


def _dedupe(items: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


class AllocationValidator:
    """Runs every pre-allocation check for one request and summarises them."""

    def __init__(
        self,
        capacity: CapacityEngine | None = None,
        allow_over_allocation: bool | None = None,
        validate_leave_schedules: bool = True,
    ) -> None:
        self.capacity = capacity or CapacityEngine()
        self.allow_over_allocation = (
            allow_over_allocation
            if allow_over_allocation is not None
            else not self.capacity.strict_enforcement
        )
        self.validate_leave_schedules = validate_leave_schedules

    def check_availability(
        self,
        resource_ref: str,
        date_range: DateRange | None,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
        leaves: Iterable[LeaveRecord] = (),
    ) -> CheckResult:
        """Overlapping work is a warning, overlapping leave an error."""
        allocations = list(allocations)
        members = list(members)
        member = find_member(resource_ref, members)
        if member is None:
            return _not_found("availability", resource_ref)

        result = CheckResult(type="availability", message="Resource is available")
        overlaps = []
        if date_range is not None:
            for a in allocations:
                if not member.matches(a.resource) or not self.capacity.is_active(a):
                    continue
                if a.plan.task_start and a.plan.task_end and date_range.overlaps(a.plan.task_start, a.plan.task_end):
                    overlaps.append({
                        "type": "allocation_overlap",
                        "allocation_id": a.id,
                        "project_name": a.project_name,
                        "task_name": a.task_name,
                        "start": max(a.plan.task_start, date_range.start_date).isoformat(),
                        "end": min(a.plan.task_end, date_range.end_date).isoformat(),
                        "allocation_percentage": str(a.share),
                    })
        if overlaps:
            result.conflicts.extend(overlaps)
            result.severity = Severity.WARNING
            result.message = f"Resource has {len(overlaps)} conflicting allocation(s)"

        if date_range is not None and self.validate_leave_schedules:
            leave_hits = [
                {
                    "type": "leave_conflict",
                    "leave_id": leave.id,
                    "leave_type": leave.type.value,
                    "start": max(leave.first_day, date_range.start_date).isoformat(),
                    "end": min(leave.last_day, date_range.end_date).isoformat(),
                }
                for leave in leaves
                if member.matches(leave.member_name) and date_range.overlaps(leave.first_day, leave.last_day)
            ]
            if leave_hits:
                result.conflicts.extend(leave_hits)
                result.is_valid = False
                result.severity = Severity.ERROR
                result.message = f"Resource has {len(leave_hits)} leave conflict(s)"

        utilization = self.capacity.calculate_utilization(resource_ref, allocations, members, date_range)
        limit = self.capacity.threshold_for(member)
        over = max(Decimal(0), utilization.current_utilization - limit)
        if utilization.current_utilization > limit:
            result.conflicts.append({
                "type": "capacity_exceeded",
                "message": "Resource capacity exceeded during period",
                "current_utilization": str(utilization.current_utilization),
                "max_capacity": str(member.max_capacity),
                "over_allocation": str(over),
            })
            if over > SIGNIFICANT_OVERAGE:
                result.is_valid = False
                result.severity = Severity.ERROR
                result.message = "Resource significantly over-allocated during period"
            elif result.severity != Severity.ERROR:
                result.severity = Severity.WARNING
                result.message = "Resource near capacity limit during period"

        if result.conflicts:
            result.recommendations.append("Consider adjusting allocation dates or reducing allocation percentage")
            if overlaps:
                result.recommendations.append("Review existing allocations for potential rescheduling")
        result.details = {"resource": member.name, "current_utilization": str(utilization.current_utilization)}
        return result

    def check_capacity_limits(
        self,
        resource_ref: str,
        requested_percentage: Decimal,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
    ) -> CheckResult:
        members = list(members)
        member = find_member(resource_ref, members)
        if member is None:
            return _not_found("capacity_limits", resource_ref)

        result = CheckResult(type="capacity_limits", message="Capacity limits respected")
        if requested_percentage < Decimal("0.1") or requested_percentage > Decimal("1.0"):
            result.is_valid = False
            result.severity = Severity.ERROR
            result.message = (
                f"Invalid allocation percentage: {requested_percentage}. Must be between 0.1 and 1.0"
            )
            return result

        utilization = self.capacity.calculate_utilization(resource_ref, allocations, members)
        current = utilization.current_utilization
        projected = current + requested_percentage
        limit = self.capacity.threshold_for(member)
        result.details = {
            "requested_percentage": str(requested_percentage),
            "current_utilization": str(current),
            "projected_utilization": str(projected),
            "max_capacity": str(member.max_capacity),
            "over_allocation_threshold": str(limit),
        }

        if projected > limit:
            over = ((projected - limit) * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            if self.allow_over_allocation:
                result.severity = Severity.WARNING
                result.message = f"Allocation exceeds threshold by {over}%"
            else:
                result.is_valid = False
                result.severity = Severity.ERROR
                result.message = f"Allocation would exceed capacity threshold by {over}%"
            headroom = max(Decimal("0.1"), limit - current).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            result.recommendations.append(f"Reduce allocation percentage to {headroom} or less")
            if utilization.active_allocations:
                result.recommendations.append("Consider rescheduling or reducing existing allocations")
        elif projected > member.max_capacity:
            result.severity = Severity.WARNING
            result.message = "Allocation exceeds base capacity but within threshold"
            result.recommendations.append("Monitor resource workload closely for signs of overwork")

        if projected > Decimal("0.9"):
            result.recommendations.append(
                "Resource will be at very high utilization - ensure adequate support and monitoring"
            )
        return result

    def sustainability_score(
        self,
        existing: list[Allocation],
        requested_percentage: Decimal,
        member: TeamMember,
    ) -> int:
        """0-100 score; lower means the resulting workload is harder to sustain."""
        score = Decimal(100)
        total = sum((a.share for a in existing), Decimal(0)) + requested_percentage
        if total > 1:
            score -= (total - 1) * 30
        task_count = len(existing) + 1
        if task_count > 3:
            score -= (task_count - 3) * 10
        sophisticated = sum(1 for a in existing if (a.complexity or "medium").lower() == "sophisticated")
        if sophisticated > 1:
            score -= (sophisticated - 1) * 15
        if member.tier_level >= 3:
            score += 5
        rounded = int(score.to_integral_value(rounding=ROUND_HALF_UP))
        return max(0, min(100, rounded))

    def check_workload(
        self,
        request: AllocationRequest,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
    ) -> CheckResult:
        member = find_member(request.resource, members)
        if member is None:
            return _not_found("workload_constraints", request.resource)

        result = CheckResult(type="workload_constraints", message="Workload constraints satisfied")
        existing = self.capacity.active_allocations(member, allocations)
        limit = self.capacity.max_concurrent_allocations
        if len(existing) >= limit:
            result.severity = Severity.WARNING
            result.message = f"Resource at maximum concurrent task limit ({limit})"
            result.recommendations.append(
                "Consider waiting for current tasks to complete or reassigning to another resource"
            )

        score = self.sustainability_score(existing, request.share, member)
        if score < 50:
            result.is_valid = False
            result.severity = Severity.ERROR
            result.message = f"Unsustainable workload detected: {score}%"
            result.recommendations.append(
                "Immediate action required to reduce workload or provide additional resources"
            )
        elif score < 70:
            if result.severity == Severity.INFO:
                result.severity = Severity.WARNING
                result.message = f"Low workload sustainability score: {score}%"
            result.recommendations.append("Workload may not be sustainable long-term - consider load balancing")

        complexities = [(a.complexity or "medium").lower() for a in existing]
        complexities.append((request.complexity or "medium").lower())
        sophisticated = complexities.count("sophisticated")
        high = complexities.count("high")
        if sophisticated > 2:
            result.recommendations.append(
                "Too many sophisticated complexity tasks - consider redistributing workload"
            )
        elif sophisticated + high > 3:
            result.recommendations.append(
                "High concentration of complex tasks - ensure adequate support and monitoring"
            )

        result.details = {
            "current_task_count": len(existing),
            "max_concurrent_tasks": limit,
            "sustainability_score": score,
        }
        return result

    def check_tier_fit(
        self,
        resource_ref: str,
        complexity: str | None,
        members: Iterable[TeamMember],
    ) -> CheckResult:
        member = find_member(resource_ref, members)
        if member is None:
            return _not_found("tier_fit", resource_ref)

        level = (complexity or "medium").lower()
        low, high = OPTIMAL_TIER_RANGES.get(level, (2, 4))
        tier = member.tier_level
        result = CheckResult(
            type="tier_fit",
            message=f"Tier {tier} suits {level} complexity",
            details={"tier_level": tier, "optimal_range": [low, high]},
        )
        if tier < low:
            result.severity = Severity.WARNING
            result.message = f"Tier {tier} is below the recommended range for {level} complexity"
            result.recommendations.append(
                f"Consider assigning a more senior resource (tier {low}+ recommended for {level} complexity)"
            )
        elif tier > high:
            result.severity = Severity.WARNING
            result.message = f"Tier {tier} is above the recommended range for {level} complexity"
            result.recommendations.append(
                f"Resource may be overqualified for {level} complexity task - "
                "consider utilizing on higher complexity work"
            )
        return result

    def validate(
        self,
        request: AllocationRequest,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
        leaves: Iterable[LeaveRecord] = (),
    ) -> PreAllocationReport:
        """Run every check and fold them into one recommendation."""
        allocations = list(allocations)
        members = list(members)
        date_range = None
        if request.start_date and request.end_date:
            date_range = DateRange(start_date=request.start_date, end_date=request.end_date)

        checks = [
            self.check_availability(request.resource, date_range, allocations, members, leaves),
            self.check_tier_fit(request.resource, request.complexity, members),
            self.check_capacity_limits(request.resource, request.share, allocations, members),
            self.check_workload(request, allocations, members),
        ]

        errors = sum(1 for c in checks if c.severity == Severity.ERROR)
        warnings = sum(1 for c in checks if c.severity == Severity.WARNING)
        if errors:
            risk, verdict = "high", "reject"
            summary = CheckResult(
                type="cross_validation",
                is_valid=False,
                severity=Severity.ERROR,
                message=f"{errors} critical validation error(s) found",
            )
        elif warnings > 2:
            risk, verdict = "medium", "proceed_with_caution"
            summary = CheckResult(
                type="cross_validation",
                severity=Severity.WARNING,
                message=f"{warnings} validation warning(s) found",
            )
        elif warnings:
            risk, verdict = "low", "proceed_with_monitoring"
            summary = CheckResult(
                type="cross_validation",
                severity=Severity.WARNING,
                message=f"{warnings} minor validation warning(s) found",
            )
        else:
            risk, verdict = "low", "proceed"
            summary = CheckResult(type="cross_validation", message="Cross-validation passed")

        recommendations = _dedupe(r for c in checks for r in c.recommendations)
        summary.recommendations = recommendations
        summary.details = {"overall_risk": risk, "final_recommendation": verdict}
        logger.debug("Pre-check for %s: %s (%s risk)", request.resource, verdict, risk)
        return PreAllocationReport(
            is_valid=errors == 0,
            overall_risk=risk,
            final_recommendation=verdict,
            checks=[*checks, summary],
            recommendations=recommendations,
        )
