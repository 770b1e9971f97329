"""Tests for utilization, over-allocation and allocation validation."""
from datetime import date
from decimal import Decimal

import pytest

from resplan.engine.capacity import CapacityEngine, utilization_status
from resplan.models import Allocation, AllocationPlan, AllocationRequest, DateRange, TeamMember
from resplan.schemas.capacity import Severity


@pytest.fixture
def alice_at_110(make_allocation) -> list[Allocation]:
    return [
        make_allocation("A-1", "Alice", "0.6", project_name="Alpha"),
        make_allocation("A-2", "alice", "0.5", project_name="Beta"),
        make_allocation("A-3", "Budi", "0.5", project_name="Alpha"),
    ]


class TestCalculateUtilization:
    def test_sums_active_shares(self, engine, members, alice_at_110) -> None:
        result = engine.calculate_utilization("Alice", alice_at_110, members)
        assert result.current_utilization == Decimal("1.1")
        assert result.utilization_percentage == Decimal("110")
        assert result.resource_name == "Alice"
        assert [a.allocation_id for a in result.active_allocations] == ["A-1", "A-2"]

    def test_lookup_by_member_id(self, engine, members, alice_at_110) -> None:
        result = engine.calculate_utilization("M-1", alice_at_110, members)
        assert result.current_utilization == Decimal("1.1")
        assert result.resource_id == "M-1"

    def test_terminal_allocations_excluded(self, engine, members, make_allocation) -> None:
        allocations = [
            make_allocation("A-1", "Alice", "0.5"),
            make_allocation("A-2", "Alice", "0.5", task_name="Completed"),
            make_allocation("A-3", "Alice", "0.5", task_name="Idle"),
            make_allocation("A-4", "Alice", "0.5", status="CANCELLED"),
            make_allocation("A-5", "Alice", "0.5", status="completed"),
        ]
        result = engine.calculate_utilization("Alice", allocations, members)
        assert result.current_utilization == Decimal("0.5")

    def test_terminal_task_names_ignore_case(self, engine, members, make_allocation) -> None:
        allocations = [
            make_allocation("A-1", "Alice", "0.5", task_name="completed"),
            make_allocation("A-2", "Alice", "0.5", task_name="idle"),
            make_allocation("A-3", "Alice", "0.5", task_name="COMPLETED"),
        ]
        result = engine.calculate_utilization("Alice", allocations, members)
        assert result.current_utilization == 0
        assert result.active_allocations == []

    def test_custom_completion_phases(self, test_settings, members, make_allocation) -> None:
        engine = CapacityEngine(completion_phases=["Closed"], settings=test_settings)
        allocations = [
            make_allocation("A-1", "Alice", "0.5", task_name="Closed"),
            make_allocation("A-2", "Alice", "0.5", task_name="Completed"),
        ]
        assert engine.calculate_utilization("Alice", allocations, members).current_utilization == Decimal("0.5")

    def test_share_fallbacks(self, engine, members) -> None:
        allocations = [
            Allocation(id="A-1", resource="Alice", workload=Decimal("0.3")),
            Allocation(id="A-2", resource="Alice"),
        ]
        assert engine.calculate_utilization("Alice", allocations, members).current_utilization == Decimal("1.3")

    def test_date_range_filter(self, engine, members, make_allocation) -> None:
        allocations = [
            make_allocation("A-1", "Alice", "0.5", start=date(2025, 1, 1), end=date(2025, 1, 31)),
            make_allocation("A-2", "Alice", "0.3", start=date(2025, 2, 10), end=date(2025, 3, 10)),
            make_allocation("A-3", "Alice", "0.2"),
        ]
        february = DateRange(start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))
        result = engine.calculate_utilization("Alice", allocations, members, february)
        assert [a.allocation_id for a in result.active_allocations] == ["A-2", "A-3"]
        assert result.current_utilization == Decimal("0.5")

    def test_rounded_to_three_places(self, engine, members, make_allocation) -> None:
        allocations = [make_allocation(f"A-{i}", "Alice", "0.33333") for i in range(3)]
        result = engine.calculate_utilization("Alice", allocations, members)
        assert result.current_utilization == Decimal("1.000")
        assert result.utilization_percentage == Decimal("100.00")

    def test_percentage_of_max_capacity(self, engine, make_allocation) -> None:
        members = [TeamMember(name="Part Timer", max_capacity=Decimal("0.8"))]
        allocations = [make_allocation("A-1", "part timer", "0.4")]
        assert engine.calculate_utilization("Part Timer", allocations, members).utilization_percentage == Decimal("50")

    def test_unknown_resource(self, engine, members, alice_at_110) -> None:
        result = engine.calculate_utilization("Nobody", alice_at_110, members)
        assert result.current_utilization == 0
        assert result.error == "Resource not found: Nobody"


class TestDetectOverAllocation:
    def test_over_default_threshold(self, engine, members, alice_at_110, make_allocation) -> None:
        allocations = alice_at_110 + [make_allocation("A-4", "Alice", "0.2")]
        result = engine.detect_over_allocation("Alice", allocations, members)
        assert result.is_over_allocated
        assert result.over_allocation_threshold == Decimal("1.2")
        assert result.over_allocation_amount == Decimal("0.1")
        assert result.conflicting_allocations == ["A-1", "A-2", "A-4"]

    def test_at_threshold_is_not_over(self, engine, members, alice_at_110, make_allocation) -> None:
        allocations = alice_at_110 + [make_allocation("A-4", "Alice", "0.1")]
        result = engine.detect_over_allocation("Alice", allocations, members)
        assert not result.is_over_allocated
        assert result.over_allocation_amount == 0
        assert result.conflicting_allocations == []

    def test_member_threshold_wins(self, engine, members, make_allocation) -> None:
        allocations = [make_allocation("C-1", "Citra", "0.7"), make_allocation("C-2", "Citra", "0.6")]
        result = engine.detect_over_allocation("Citra", allocations, members, threshold=Decimal("1.0"))
        assert result.over_allocation_threshold == Decimal("1.5")
        assert not result.is_over_allocated

    def test_threshold_override(self, engine, members, alice_at_110) -> None:
        result = engine.detect_over_allocation("Alice", alice_at_110, members, threshold=Decimal("1.0"))
        assert result.is_over_allocated
        assert result.over_allocation_amount == Decimal("0.1")

    def test_engine_default_threshold(self, test_settings, members, alice_at_110) -> None:
        engine = CapacityEngine(default_threshold=Decimal("1.0"), settings=test_settings)
        assert engine.detect_over_allocation("Alice", alice_at_110, members).is_over_allocated

    def test_unknown_resource(self, engine, members, alice_at_110) -> None:
        result = engine.detect_over_allocation("Nobody", alice_at_110, members)
        assert not result.is_over_allocated
        assert result.error is not None


class TestValidateAllocation:
    def test_strict_rejects_over_threshold(self, engine, members, alice_at_110) -> None:
        request = AllocationRequest(resource="Alice", allocation_percentage=Decimal("0.5"))
        result = engine.validate_allocation(request, alice_at_110, members, strict_enforcement=True)
        assert not result.is_valid
        assert result.projected_utilization == Decimal("1.6")
        assert any("over-allocation" in e.message for e in result.errors)
        assert all(e.severity == Severity.ERROR for e in result.errors)
        assert len(result.conflicts) == 2

    def test_lenient_warns_and_allows(self, engine, members, alice_at_110) -> None:
        request = AllocationRequest(resource="Alice", allocation_percentage=Decimal("0.5"))
        result = engine.validate_allocation(request, alice_at_110, members)
        assert result.is_valid
        assert result.errors == []
        assert any("exceed capacity threshold" in w.message for w in result.warnings)
        assert [c.allocation_id for c in result.conflicts] == ["A-1", "A-2"]
        assert all(c.conflict == "capacity_overlap" for c in result.conflicts)

    def test_strict_from_engine_configuration(self, test_settings, members, alice_at_110) -> None:
        engine = CapacityEngine(strict_enforcement=True, settings=test_settings)
        request = AllocationRequest(resource="Alice", allocation_percentage=Decimal("0.5"))
        assert not engine.validate_allocation(request, alice_at_110, members).is_valid

    def test_unknown_resource_returns_early(self, engine, members, alice_at_110) -> None:
        request = AllocationRequest(resource="Nobody", allocation_percentage=Decimal("0.5"))
        result = engine.validate_allocation(request, alice_at_110, members)
        assert not result.is_valid
        assert result.errors[0].code == "resource_not_found"
        assert result.projected_utilization == 0

    @pytest.mark.parametrize("pct", ["0.05", "1.5"])
    def test_percentage_out_of_range(self, engine, members, pct) -> None:
        request = AllocationRequest(resource="Budi", allocation_percentage=Decimal(pct))
        result = engine.validate_allocation(request, [], members)
        assert not result.is_valid
        assert result.errors[0].code == "invalid_percentage"
        assert result.projected_utilization == Decimal(pct)

    def test_over_max_capacity_within_threshold(self, engine, members, make_allocation) -> None:
        allocations = [make_allocation("B-1", "Budi", "0.6")]
        request = AllocationRequest(resource="Budi", allocation_percentage=Decimal("0.5"))
        result = engine.validate_allocation(request, allocations, members)
        assert result.is_valid
        assert [w.code for w in result.warnings] == ["over_max_capacity"]
        assert result.conflicts == []
        assert any("high utilization" in r for r in result.recommendations)

    def test_high_utilization_boundary(self, engine, members, make_allocation) -> None:
        allocations = [make_allocation("B-1", "Budi", "0.3")]
        request = AllocationRequest(resource="Budi", allocation_percentage=Decimal("0.5"))
        result = engine.validate_allocation(request, allocations, members)
        assert any("high utilization" in r for r in result.recommendations)
        assert result.warnings == []

    def test_low_utilization_no_advice(self, engine, members) -> None:
        request = AllocationRequest(resource="Budi", allocation_percentage=Decimal("0.5"))
        result = engine.validate_allocation(request, [], members)
        assert result.is_valid
        assert result.recommendations == []

    def test_many_allocations_suggest_prioritisation(self, engine, members, make_allocation) -> None:
        allocations = [make_allocation(f"B-{i}", "Budi", "0.1") for i in range(5)]
        request = AllocationRequest(resource="Budi", allocation_percentage=Decimal("0.1"))
        result = engine.validate_allocation(request, allocations, members)
        assert any("prioritization" in r for r in result.recommendations)

    def test_workload_used_when_no_percentage(self, engine, members) -> None:
        request = AllocationRequest(resource="Budi", workload=Decimal("0.4"))
        assert engine.validate_allocation(request, [], members).projected_utilization == Decimal("0.4")


class TestAvailability:
    @pytest.mark.parametrize(
        "pct, status",
        [
            ("0.4", "available"),
            ("0.5", "moderate-utilization"),
            ("0.8", "high-utilization"),
            ("1.0", "at-capacity"),
            ("1.1", "over-capacity"),
        ],
    )
    def test_status_buckets(self, engine, members, make_allocation, pct, status) -> None:
        result = engine.get_resource_availability("Budi", [make_allocation("B-1", "Budi", pct)], members)
        assert result.status == status

    def test_available_capacity(self, engine, members, alice_at_110) -> None:
        result = engine.get_resource_availability("Alice", alice_at_110, members)
        assert result.available
        assert result.available_capacity == Decimal("0.1")
        assert result.available_percentage == Decimal("10.0")
        assert result.active_allocations_count == 2

    def test_no_capacity_left(self, engine, members, alice_at_110, make_allocation) -> None:
        allocations = alice_at_110 + [make_allocation("A-4", "Alice", "0.3")]
        result = engine.get_resource_availability("Alice", allocations, members)
        assert not result.available
        assert result.available_capacity == 0
        assert result.status == "over-capacity"

    def test_unknown_resource(self, engine, members) -> None:
        result = engine.get_resource_availability("Nobody", [], members)
        assert not result.available
        assert result.error == "Resource not found: Nobody"

    def test_reaching_threshold_is_over_capacity(self, engine, make_allocation) -> None:
        # 90% of max capacity would be high-utilization, but it equals the member's threshold
        members = [TeamMember(name="Eko", over_allocation_threshold=Decimal("0.9"))]
        allocations = [make_allocation("E-1", "Eko", "0.9")]
        result = engine.get_resource_availability("Eko", allocations, members)
        assert result.status == "over-capacity"
        assert not result.available
        summary = engine.get_utilization_summary(allocations, members)
        assert summary[0].status == "over-capacity"
        assert not summary[0].is_over_allocated

    def test_status_helper_over_threshold(self) -> None:
        assert utilization_status(Decimal("90"), over_threshold=True) == "over-capacity"


class TestLoadStateAndSummary:
    @pytest.mark.parametrize(
        "count, state",
        [(0, "available"), (2, "available"), (3, "limited"), (4, "limited"), (5, "at-capacity"), (7, "at-capacity")],
    )
    def test_load_state(self, engine, count, state) -> None:
        assert engine.load_state(count) == state

    def test_summary_active_members_sorted(self, engine, members, alice_at_110) -> None:
        summary = engine.get_utilization_summary(alice_at_110, members)
        assert [e.resource_name for e in summary] == ["Alice", "Budi", "Citra"]
        assert summary[0].utilization_percentage == Decimal("110")
        assert summary[0].status == "over-capacity"
        assert not summary[0].is_over_allocated
        assert summary[1].status == "moderate-utilization"
        assert summary[2].load_state == "available"

    def test_summary_flags_over_allocation(self, engine, members, alice_at_110, make_allocation) -> None:
        allocations = alice_at_110 + [make_allocation("A-4", "Alice", "0.3")]
        summary = engine.get_utilization_summary(allocations, members)
        assert summary[0].is_over_allocated
        assert summary[0].over_allocation_amount == Decimal("0.2")
        assert summary[0].load_state == "limited"


class TestPhaseSpan:
    def test_actual_span(self, engine) -> None:
        allocation = Allocation(
            id="A-1",
            resource="Alice",
            phase="Execution",
            plan=AllocationPlan(task_start=date(2025, 1, 1), task_end=date(2025, 1, 11)),
        )
        span = engine.calculate_phase_span(allocation)
        assert span.is_valid and not span.is_projected
        assert (span.days, span.hours) == (10, 240)
        assert span.message == "Actual span from Execution phase to Completed"

    def test_projected_span_uses_now(self, engine) -> None:
        allocation = Allocation(
            id="A-1", resource="Alice", phase="Planning", plan=AllocationPlan(task_start=date(2025, 1, 1))
        )
        span = engine.calculate_phase_span(allocation, now=date(2025, 1, 21))
        assert span.is_projected
        assert span.days == 20
        assert span.end_date == date(2025, 1, 21)

    @pytest.mark.parametrize("phase", ["Completed", "Idle", "completed"])
    def test_terminal_phase_is_zero(self, engine, phase) -> None:
        span = engine.calculate_phase_span(Allocation(id="A-1", resource="Alice", phase=phase))
        assert span.is_completed
        assert span.days == 0

    def test_missing_phase(self, engine) -> None:
        span = engine.calculate_phase_span(Allocation(id="A-1", resource="Alice"))
        assert not span.is_valid
        assert span.error == "No allocation phase specified"

    def test_missing_start(self, engine) -> None:
        span = engine.calculate_phase_span(Allocation(id="A-1", resource="Alice", phase="Execution"))
        assert not span.is_valid
        assert span.error == "No task start date available"
