"""Resource utilization, over-allocation detection and allocation validation."""
import datetime as dt
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from resplan.config import Settings, get_settings
from resplan.engine.calendar import DateLike, to_date
from resplan.models.allocation import Allocation, AllocationRequest
from resplan.models.calendar import DateRange
from resplan.models.team import TeamMember
from resplan.schemas.capacity import (
    AllocationConflict,
    AllocationShare,
    AllocationValidation,
    AvailabilityResult,
    OverAllocationResult,
    PhaseSpan,
    Severity,
    UtilizationResult,
    UtilizationSummaryEntry,
    ValidationIssue,
)

logger = logging.getLogger(__name__)

INACTIVE_STATUSES = {"completed", "cancelled", "idle"}
MIN_ALLOCATION = Decimal("0.1")
MAX_ALLOCATION = Decimal("1.0")


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _round(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)


def _pct(value: Decimal) -> str:
    return f"{_round(value * 100, 1)}%"


def find_member(resource_ref: str | None, members: Iterable[TeamMember]) -> TeamMember | None:
    """Member whose id or name (case-insensitive) is resource_ref."""
    for member in members:
        if member.matches(resource_ref):
            return member
    return None


def utilization_status(utilization_percentage: Decimal, over_threshold: bool = False) -> str:
    """Bucket a utilization percentage of max capacity."""
    if over_threshold or utilization_percentage > 100:
        return "over-capacity"
    if utilization_percentage == 100:
        return "at-capacity"
    if utilization_percentage >= 80:
        return "high-utilization"
    if utilization_percentage >= 50:
        return "moderate-utilization"
    return "available"


class CapacityEngine:
    """Capacity checks over a caller-supplied snapshot of members and allocations.

    Holds only its own configuration. Every method reads the snapshot it is
    given and returns a fresh result record.
    """

    def __init__(
        self,
        default_threshold: Decimal | float | None = None,
        strict_enforcement: bool | None = None,
        completion_phases: list[str] | None = None,
        high_utilization_threshold: Decimal | float | None = None,
        max_concurrent_allocations: int | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.default_threshold = _dec(
            default_threshold if default_threshold is not None else settings.default_over_allocation_threshold
        )
        self.strict_enforcement = (
            strict_enforcement if strict_enforcement is not None else settings.strict_enforcement
        )
        self.completion_phases = list(
            completion_phases if completion_phases is not None else settings.completion_phases
        )
        self.high_utilization_threshold = _dec(
            high_utilization_threshold
            if high_utilization_threshold is not None
            else settings.high_utilization_threshold
        )
        self.max_concurrent_allocations = (
            max_concurrent_allocations
            if max_concurrent_allocations is not None
            else settings.max_concurrent_allocations
        )

    def threshold_for(self, member: TeamMember, override: Decimal | float | None = None) -> Decimal:
        """Member's own threshold, else the override, else the engine default."""
        if member.over_allocation_threshold is not None:
            return member.over_allocation_threshold
        if override is not None:
            return _dec(override)
        return self.default_threshold

    def is_completion_phase(self, name: str | None) -> bool:
        """True when name is one of the completion phases, ignoring case."""
        if not name:
            return False
        return name.strip().lower() in {p.lower() for p in self.completion_phases}

    def is_active(self, allocation: Allocation, date_range: DateRange | None = None) -> bool:
        """False for terminal allocations or ones outside date_range."""
        if allocation.status and allocation.status.lower() in INACTIVE_STATUSES:
            return False
        if self.is_completion_phase(allocation.task_name):
            return False
        if date_range is not None and allocation.plan.task_start and allocation.plan.task_end:
            return date_range.overlaps(allocation.plan.task_start, allocation.plan.task_end)
        return True

    def active_allocations(
        self,
        member: TeamMember,
        allocations: Iterable[Allocation],
        date_range: DateRange | None = None,
    ) -> list[Allocation]:
        return [
            a for a in allocations
            if member.matches(a.resource) and self.is_active(a, date_range)
        ]

    def calculate_utilization(
        self,
        resource_ref: str,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
        date_range: DateRange | None = None,
    ) -> UtilizationResult:
        """Sum of active allocation shares for one member."""
        member = find_member(resource_ref, members)
        if member is None:
            logger.warning("Resource not found: %s", resource_ref)
            return UtilizationResult(resource_name=resource_ref, error=f"Resource not found: {resource_ref}")

        active = self.active_allocations(member, allocations, date_range)
        shares = [
            AllocationShare(
                allocation_id=a.id,
                project_name=a.project_name,
                task_name=a.task_name,
                allocation_percentage=a.share,
                start_date=a.plan.task_start,
                end_date=a.plan.task_end,
                category=a.category,
                complexity=a.complexity,
            )
            for a in active
        ]
        current = sum((s.allocation_percentage for s in shares), Decimal(0))
        return UtilizationResult(
            resource_name=member.name,
            resource_id=member.id or resource_ref,
            current_utilization=_round(current, 3),
            utilization_percentage=_round(current / member.max_capacity * 100, 2),
            max_capacity=member.max_capacity,
            active_allocations=shares,
        )

    def detect_over_allocation(
        self,
        resource_ref: str,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
        threshold: Decimal | float | None = None,
    ) -> OverAllocationResult:
        members = list(members)
        utilization = self.calculate_utilization(resource_ref, allocations, members)
        if utilization.error:
            return OverAllocationResult(resource_name=resource_ref, error=utilization.error)

        member = find_member(resource_ref, members)
        limit = self.threshold_for(member, threshold)
        current = utilization.current_utilization
        is_over = current > limit
        if is_over:
            logger.info("%s over-allocated at %s (threshold %s)", member.name, current, limit)
        return OverAllocationResult(
            is_over_allocated=is_over,
            resource_name=member.name,
            current_utilization=current,
            max_capacity=member.max_capacity,
            over_allocation_threshold=limit,
            over_allocation_amount=max(Decimal(0), current - limit),
            conflicting_allocations=[s.allocation_id for s in utilization.active_allocations] if is_over else [],
        )

    def validate_allocation(
        self,
        request: AllocationRequest,
        existing_allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
        strict_enforcement: bool | None = None,
        threshold: Decimal | float | None = None,
    ) -> AllocationValidation:
        """Check a proposed allocation against the member's current load.

        Over-threshold projections are errors under strict enforcement and
        warnings otherwise; the request stays valid unless something errors.
        """
        members = list(members)
        result = AllocationValidation()
        member = find_member(request.resource, members)
        if member is None:
            result.is_valid = False
            result.errors.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    code="resource_not_found",
                    message=f"Resource not found: {request.resource}",
                )
            )
            return result

        requested = request.share
        if requested < MIN_ALLOCATION or requested > MAX_ALLOCATION:
            result.is_valid = False
            result.errors.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    code="invalid_percentage",
                    message=f"Invalid allocation percentage: {requested}. Must be between 0.1 and 1.0",
                )
            )

        utilization = self.calculate_utilization(request.resource, existing_allocations, members)
        current = utilization.current_utilization
        projected = current + requested
        limit = self.threshold_for(member, threshold)
        strict = self.strict_enforcement if strict_enforcement is None else strict_enforcement
        result.current_utilization = current
        result.projected_utilization = projected
        result.over_allocation_threshold = limit

        if projected > limit:
            over = projected - limit
            if strict:
                result.is_valid = False
                result.errors.append(
                    ValidationIssue(
                        severity=Severity.ERROR,
                        code="over_allocation",
                        message=(
                            f"Allocation would cause over-allocation. Projected utilization: {_pct(projected)}, "
                            f"Threshold: {_pct(limit)}, Over by: {_pct(over)}"
                        ),
                    )
                )
            else:
                result.warnings.append(
                    ValidationIssue(
                        severity=Severity.WARNING,
                        code="over_threshold",
                        message=f"Allocation will exceed capacity threshold. Projected utilization: {_pct(projected)}",
                    )
                )
            result.conflicts = [
                AllocationConflict(
                    allocation_id=s.allocation_id,
                    project_name=s.project_name,
                    allocation_percentage=s.allocation_percentage,
                )
                for s in utilization.active_allocations
                if s.allocation_percentage > 0
            ]
        elif projected > member.max_capacity:
            result.warnings.append(
                ValidationIssue(
                    severity=Severity.WARNING,
                    code="over_max_capacity",
                    message=f"Allocation exceeds resource's maximum capacity ({_round(member.max_capacity * 100, 0)}%)",
                )
            )

        if self.high_utilization_threshold <= projected <= limit:
            result.recommendations.append(
                "Resource will be at high utilization. Consider monitoring workload closely."
            )
        if len(utilization.active_allocations) >= self.max_concurrent_allocations:
            result.recommendations.append(
                "Resource already has many concurrent allocations. Consider task prioritization."
            )
        logger.debug(
            "Validated %s for %s: valid=%s projected=%s", requested, member.name, result.is_valid, projected
        )
        return result

    def get_resource_availability(
        self,
        resource_ref: str,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
        date_range: DateRange | None = None,
    ) -> AvailabilityResult:
        members = list(members)
        member = find_member(resource_ref, members)
        if member is None:
            logger.warning("Resource not found: %s", resource_ref)
            return AvailabilityResult(resource_name=resource_ref, error=f"Resource not found: {resource_ref}")

        utilization = self.calculate_utilization(resource_ref, allocations, members, date_range)
        limit = self.threshold_for(member)
        current = utilization.current_utilization
        capacity = max(Decimal(0), limit - current)
        return AvailabilityResult(
            available=capacity > 0,
            resource_name=member.name,
            current_utilization=current,
            max_capacity=member.max_capacity,
            over_allocation_threshold=limit,
            available_capacity=_round(capacity, 3),
            available_percentage=_round(capacity * 100, 1),
            status=utilization_status(utilization.utilization_percentage, current >= limit),
            active_allocations_count=len(utilization.active_allocations),
        )

    def load_state(self, active_count: int) -> str:
        """Derived load state from the number of active allocations."""
        if active_count >= self.max_concurrent_allocations:
            return "at-capacity"
        if active_count >= 3:
            return "limited"
        return "available"

    def get_utilization_summary(
        self,
        allocations: Iterable[Allocation],
        members: Iterable[TeamMember],
    ) -> list[UtilizationSummaryEntry]:
        """One entry per active member, busiest first."""
        allocations = list(allocations)
        members = list(members)
        entries = []
        for member in members:
            if not member.is_active:
                continue
            ref = member.id or member.name
            utilization = self.calculate_utilization(ref, allocations, members)
            over = self.detect_over_allocation(ref, allocations, members)
            count = len(utilization.active_allocations)
            at_threshold = over.current_utilization >= over.over_allocation_threshold
            entries.append(
                UtilizationSummaryEntry(
                    resource_id=member.id,
                    resource_name=member.name,
                    resource_type=member.type,
                    current_utilization=utilization.current_utilization,
                    utilization_percentage=utilization.utilization_percentage,
                    max_capacity=member.max_capacity,
                    is_over_allocated=over.is_over_allocated,
                    over_allocation_amount=over.over_allocation_amount,
                    active_allocations_count=count,
                    status=utilization_status(utilization.utilization_percentage, at_threshold),
                    load_state=self.load_state(count),
                )
            )
        entries.sort(key=lambda e: e.utilization_percentage, reverse=True)
        return entries

    def calculate_phase_span(
        self,
        allocation: Allocation,
        completion_phase: str = "Completed",
        now: DateLike | None = None,
    ) -> PhaseSpan:
        """Days and hours from plan start to plan end.

        Without a plan end the span runs to now (today when not given) and is
        marked projected. Allocations already in a completion phase span 0.
        """
        phase = allocation.phase
        if not phase:
            return PhaseSpan(is_valid=False, end_phase=completion_phase, error="No allocation phase specified")
        if phase.lower() == completion_phase.lower() or self.is_completion_phase(phase):
            return PhaseSpan(
                is_valid=True,
                is_completed=True,
                start_phase=phase,
                end_phase=completion_phase,
                message=f"Task is already in {phase} phase",
            )
        start = allocation.plan.task_start
        if start is None:
            return PhaseSpan(
                is_valid=False,
                start_phase=phase,
                end_phase=completion_phase,
                error="No task start date available",
            )

        end = allocation.plan.task_end
        projected = end is None
        if projected:
            end = to_date(now) if now is not None else dt.date.today()
        days = abs((end - start).days)
        return PhaseSpan(
            is_valid=True,
            is_projected=projected,
            days=days,
            hours=days * 24,
            start_phase=phase,
            end_phase=completion_phase,
            start_date=start,
            end_date=end,
            message=(
                f"Projected span from {phase} phase to {completion_phase}"
                if projected
                else f"Actual span from {phase} phase to {completion_phase}"
            ),
        )
