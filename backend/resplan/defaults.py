"""Default complexity catalog and tier labels."""
from decimal import Decimal

from resplan.models.complexity import ComplexityLevel

TIER_LABELS: dict[int, str] = {
    1: "Junior",
    2: "Mid",
    3: "Senior",
    4: "Lead",
    5: "Principal",
}

COMPLEXITY_LEVELS = ["low", "medium", "high", "sophisticated"]


def default_complexity() -> dict[str, ComplexityLevel]:
    """Fresh copy of the stock catalog, keyed by lowercase level.

    days/hours are the legacy flat estimates; base_effort_hours onward drive
    the tier-adjusted model.
    """
    return {
        "low": ComplexityLevel(
            level="low",
            label="Low",
            days=Decimal("27"),
            hours=Decimal("14.5"),
            base_effort_hours=Decimal("40"),
            complexity_multiplier=Decimal("0.8"),
            risk_factor=Decimal("1.0"),
            skill_sensitivity=Decimal("0.3"),
            technical_complexity=2,
            business_complexity=2,
            integration_points=1,
            unknown_requirements=Decimal("0.1"),
        ),
        "medium": ComplexityLevel(
            level="medium",
            label="Medium",
            days=Decimal("72"),
            hours=Decimal("19"),
            base_effort_hours=Decimal("120"),
            complexity_multiplier=Decimal("1.0"),
            risk_factor=Decimal("1.2"),
            skill_sensitivity=Decimal("0.5"),
            technical_complexity=5,
            business_complexity=5,
            integration_points=3,
            unknown_requirements=Decimal("0.2"),
        ),
        "high": ComplexityLevel(
            level="high",
            label="High",
            days=Decimal("102"),
            hours=Decimal("30"),
            base_effort_hours=Decimal("320"),
            complexity_multiplier=Decimal("1.5"),
            risk_factor=Decimal("1.8"),
            skill_sensitivity=Decimal("0.8"),
            technical_complexity=7,
            business_complexity=7,
            integration_points=6,
            unknown_requirements=Decimal("0.35"),
        ),
        "sophisticated": ComplexityLevel(
            level="sophisticated",
            label="Sophisticated",
            days=Decimal("150"),
            hours=Decimal("48"),
            base_effort_hours=Decimal("640"),
            complexity_multiplier=Decimal("2.5"),
            risk_factor=Decimal("2.5"),
            skill_sensitivity=Decimal("1.2"),
            technical_complexity=9,
            business_complexity=9,
            integration_points=10,
            unknown_requirements=Decimal("0.5"),
        ),
    }
