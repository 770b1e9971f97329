"""Shared fixtures for the resplan test suite."""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from resplan.config import Settings
from resplan.defaults import default_complexity
from resplan.engine.capacity import CapacityEngine
from resplan.engine.effort import EffortCostModel
from resplan.main import app
from resplan.models import Allocation, AllocationPlan, ResourceCostTier, TaskEstimate, TaskTemplate, TeamMember


@pytest.fixture
def test_settings() -> Settings:
    """Settings pinned to the stock defaults regardless of environment."""
    return Settings(
        app_env="testing",
        capacity_factor=Decimal("0.85"),
        default_over_allocation_threshold=Decimal("1.2"),
        strict_enforcement=False,
    )


@pytest.fixture
def complexity_settings():
    return default_complexity()


@pytest.fixture
def model(test_settings) -> EffortCostModel:
    return EffortCostModel(test_settings)


@pytest.fixture
def engine(test_settings) -> CapacityEngine:
    return CapacityEngine(settings=test_settings)


@pytest.fixture
def resource_costs() -> list[ResourceCostTier]:
    return [
        ResourceCostTier(id="RC-1", resource_name="Alice", per_hour_cost=Decimal("100000"), level=1),
        ResourceCostTier(id="RC-3", resource_name="Budi", per_hour_cost=Decimal("150000"), level=3),
        ResourceCostTier(id="RC-9", resource_name="Citra", per_hour_cost=Decimal("50000"), level=2),
    ]


@pytest.fixture
def support_template() -> TaskTemplate:
    return TaskTemplate(
        id="T-SUP",
        name="Incident handling",
        category="Support",
        estimates={
            "low": TaskEstimate(days=Decimal("1"), hours=Decimal("2")),
            "medium": TaskEstimate(days=Decimal("1"), hours=Decimal("4")),
            "high": TaskEstimate(days=Decimal("2"), hours=Decimal("8")),
        },
    )


@pytest.fixture
def members() -> list[TeamMember]:
    return [
        TeamMember(id="M-1", name="Alice", type="BA", tier_level=1),
        TeamMember(id="M-2", name="Budi", type="PM", tier_level=3),
        TeamMember(
            id="M-3",
            name="Citra",
            type="BA",
            tier_level=4,
            over_allocation_threshold=Decimal("1.5"),
        ),
        TeamMember(id="M-4", name="Dewi", type="PM", is_active=False),
    ]


@pytest.fixture
def make_allocation():
    """Build an Allocation with a string percentage and optional plan dates."""

    def _make(alloc_id: str, resource: str, pct: str | None, start=None, end=None, **kwargs) -> Allocation:
        return Allocation(
            id=alloc_id,
            resource=resource,
            allocation_percentage=Decimal(pct) if pct is not None else None,
            plan=AllocationPlan(task_start=start, task_end=end),
            **kwargs,
        )

    return _make


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
