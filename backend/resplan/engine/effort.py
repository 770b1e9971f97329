"""Effort and cost model - all formulas deterministic, Decimal only. Rates are per hour."""
import logging
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

from resplan.config import Settings, get_settings
from resplan.defaults import TIER_LABELS
from resplan.engine.calendar import DateLike, months_between
from resplan.models.complexity import (
    Category,
    ComplexityLevel,
    TaskTemplate,
    get_complexity_config,
    is_project_category,
)
from resplan.models.team import ResourceCostTier
from resplan.schemas.calculation import (
    BufferedValue,
    ConfidenceInterval,
    ConfigValidation,
    CostComponents,
    CostContext,
    CostEstimate,
    DetailedCostBreakdown,
    DurationEstimate,
    EffortBreakdown,
    ThreePointEstimate,
)

logger = logging.getLogger(__name__)

MIN_ALLOCATION = Decimal("0.1")
MAX_ALLOCATION = Decimal("1.0")


def _dec(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    return value if isinstance(value, Decimal) else Decimal(str(value))


def clamp_allocation(allocation_percentage: Any) -> Decimal:
    """Allocation share limited to [0.1, 1.0]."""
    pct = _dec(allocation_percentage) if allocation_percentage is not None else MAX_ALLOCATION
    return max(MIN_ALLOCATION, min(MAX_ALLOCATION, pct))


def resolve_resource_cost(
    resource_ref: str | None,
    resource_costs: Iterable[ResourceCostTier],
) -> ResourceCostTier | None:
    """Cost record by id, then by resource name (case-insensitive)."""
    if not resource_ref:
        return None
    costs = list(resource_costs)
    for cost in costs:
        if cost.id is not None and cost.id == resource_ref:
            return cost
    lower = resource_ref.strip().lower()
    for cost in costs:
        if cost.resource_name.strip().lower() == lower:
            return cost
    return None


def calculation_method(task_or_category: Any) -> str:
    """'complexity' for Project work, 'simple' for everything else."""
    return "complexity" if is_project_category(task_or_category) else "simple"


def tier_label(tier_level: int | None) -> str:
    return TIER_LABELS.get(tier_level or 0, "Unknown")


class EffortCostModel:
    """Tier and complexity adjusted effort, cost and schedule estimates.

    Settings are read once at construction; pass a Settings instance to
    override the tier table, hours per day or PERT factors for one model.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @staticmethod
    def _round(value: Decimal, places: int = 2) -> Decimal:
        quantize = Decimal(10) ** -places
        return value.quantize(quantize, rounding=ROUND_HALF_UP)

    @staticmethod
    def _round_int(value: Decimal) -> int:
        return int(value.to_integral_value(rounding=ROUND_HALF_UP))

    @property
    def hours_per_day(self) -> Decimal:
        return Decimal(self.settings.hours_per_day)

    def _tier_multiplier(self, tier_level: int | None) -> Decimal:
        table = self.settings.tier_skill_multipliers
        if tier_level in table:
            return _dec(table[tier_level])
        return _dec(table.get(self.settings.default_tier_level, Decimal("1.0")))

    def _adjusted_tier_multiplier(self, tier_level: int | None, skill_sensitivity: Any = None) -> Decimal:
        sensitivity = (
            _dec(skill_sensitivity)
            if skill_sensitivity is not None
            else self.settings.default_skill_sensitivity
        )
        return Decimal(1) + (self._tier_multiplier(tier_level) - Decimal(1)) * sensitivity

    def tier_effort_multiplier(self, tier_level: int | None, skill_sensitivity: Any = None) -> Decimal:
        """1 + (tier multiplier - 1) x sensitivity, rounded to 2 places.

        Unknown tiers fall back to the default tier. Sensitivity 0 removes the
        tier effect entirely; None means the configured default.
        """
        return self._round(self._adjusted_tier_multiplier(tier_level, skill_sensitivity))

    def tier_adjusted_effort(
        self,
        complexity: str | None,
        tier_level: int | None,
        complexity_settings: Mapping[str, ComplexityLevel],
    ) -> EffortBreakdown:
        """Effort hours for one complexity level worked by one tier.

        Configurations without base_effort_hours keep their flat legacy hours.
        """
        config = get_complexity_config(complexity, complexity_settings)
        if config is None:
            logger.warning("Unknown complexity level: %s", complexity)
            return EffortBreakdown(error=f"Unknown complexity level: {complexity}")

        if config.base_effort_hours is None:
            hours = _dec(config.hours)
            return EffortBreakdown(
                base_hours=hours,
                adjusted_hours=hours,
                after_complexity=hours,
                after_risk=hours,
                method="legacy",
            )

        tier = tier_level if tier_level is not None else self.settings.default_tier_level
        base = _dec(config.base_effort_hours)
        complexity_mult = _dec(config.complexity_multiplier) if config.complexity_multiplier is not None else Decimal("1.0")
        risk = _dec(config.risk_factor) if config.risk_factor is not None else Decimal("1.0")
        sensitivity = (
            config.skill_sensitivity
            if config.skill_sensitivity is not None
            else self.settings.default_skill_sensitivity
        )
        tier_mult = self._adjusted_tier_multiplier(tier, sensitivity)

        after_complexity = base * complexity_mult
        after_risk = after_complexity * risk
        adjusted = self._round(after_risk * tier_mult)
        logger.debug("Effort %s/tier %s: %s h", config.level, tier, adjusted)
        return EffortBreakdown(
            base_hours=base,
            adjusted_hours=adjusted,
            skill_multiplier=self._round(tier_mult),
            complexity_multiplier=complexity_mult,
            risk_multiplier=risk,
            after_complexity=self._round(after_complexity),
            after_risk=self._round(after_risk),
            tier_level=tier,
            skill_sensitivity=_dec(sensitivity),
        )

    def simple_effort(
        self,
        complexity: str | None,
        task_template: TaskTemplate | None,
        complexity_settings: Mapping[str, ComplexityLevel],
    ) -> EffortBreakdown:
        """Flat hours for non-Project work. Never depends on tier."""
        key = (complexity or "").strip().lower()
        if task_template is not None:
            estimates = {k.lower(): v for k, v in task_template.estimates.items()}
            if key in estimates:
                hours = _dec(estimates[key].hours)
                return EffortBreakdown(
                    base_hours=hours,
                    adjusted_hours=hours,
                    after_complexity=hours,
                    after_risk=hours,
                    method="simple",
                )
            logger.warning("Template %s has no %r estimate", task_template.name, complexity)

        config = get_complexity_config(complexity, complexity_settings)
        if config is None:
            logger.warning("Unknown complexity level: %s", complexity)
            return EffortBreakdown(method="simple", error=f"Unknown complexity level: {complexity}")
        hours = _dec(config.hours)
        return EffortBreakdown(
            base_hours=hours,
            adjusted_hours=hours,
            after_complexity=hours,
            after_risk=hours,
            method="simple",
        )

    def selective_effort(
        self,
        task_or_category: Any,
        complexity: str | None,
        task_template: TaskTemplate | None,
        complexity_settings: Mapping[str, ComplexityLevel],
        tier_level: int | None = None,
    ) -> EffortBreakdown:
        """Project work uses the tier-adjusted model; all other work uses flat estimates."""
        if calculation_method(task_or_category) == "complexity":
            return self.tier_adjusted_effort(complexity, tier_level, complexity_settings)
        return self.simple_effort(complexity, task_template, complexity_settings)

    def duration_from_effort(self, effort_hours: Any, allocation_percentage: Any = None) -> DurationEstimate:
        """Working days to burn effort_hours at a clamped daily allocation."""
        effort = _dec(effort_hours)
        pct = clamp_allocation(allocation_percentage)
        hours_per_day = pct * self.hours_per_day
        days = int((effort / hours_per_day).to_integral_value(rounding=ROUND_CEILING)) if effort > 0 else 0
        return DurationEstimate(
            effort_hours=effort,
            allocation_percentage=pct,
            hours_per_day=self._round(hours_per_day),
            duration_days=days,
        )

    def project_cost(
        self,
        complexity: str | None,
        resource_ref: str | None,
        complexity_settings: Mapping[str, ComplexityLevel],
        resource_costs: Iterable[ResourceCostTier],
        tier_level: int | None = None,
        allocation_percentage: Any = None,
        category: Any = Category.PROJECT,
        task_template: TaskTemplate | None = None,
    ) -> CostEstimate:
        """Cost of one task for one resource.

        Missing complexity or resource yields a zeroed estimate with error set.
        """
        method = calculation_method(category)
        pct = clamp_allocation(allocation_percentage)
        resource = resolve_resource_cost(resource_ref, resource_costs)
        if resource is None:
            logger.warning("No resource cost for %r", resource_ref)
            return CostEstimate(
                allocation_percentage=pct,
                method=method,
                error=f"Resource not found: {resource_ref}",
            )

        tier = tier_level
        if tier is None:
            tier = resource.level if resource.level is not None else self.settings.default_tier_level
        effort = self.selective_effort(category, complexity, task_template, complexity_settings, tier)
        if effort.error:
            return CostEstimate(
                hourly_rate=resource.per_hour_cost,
                allocation_percentage=pct,
                method=method,
                breakdown=effort,
                error=effort.error,
            )

        rate = _dec(resource.per_hour_cost)
        duration = self.duration_from_effort(effort.adjusted_hours, pct)
        total = Decimal(self._round_int(effort.adjusted_hours * rate))
        return CostEstimate(
            total_cost=total,
            effort_hours=effort.adjusted_hours,
            duration_days=duration.duration_days,
            hourly_rate=rate,
            allocation_percentage=pct,
            method=method,
            breakdown=effort,
        )

    def detailed_cost_breakdown(
        self,
        complexity: str | None,
        resource_ref: str | None,
        complexity_settings: Mapping[str, ComplexityLevel],
        resource_costs: Iterable[ResourceCostTier],
        tier_level: int | None = None,
        allocation_percentage: Any = None,
        category: Any = Category.PROJECT,
        task_template: TaskTemplate | None = None,
    ) -> DetailedCostBreakdown:
        """project_cost plus the cost split into pre-skill effort and skill adjustment."""
        costs = list(resource_costs)
        summary = self.project_cost(
            complexity,
            resource_ref,
            complexity_settings,
            costs,
            tier_level=tier_level,
            allocation_percentage=allocation_percentage,
            category=category,
            task_template=task_template,
        )
        effort = summary.breakdown
        rate = summary.hourly_rate
        base_effort_cost = Decimal(self._round_int(effort.after_risk * rate))
        resolved_tier = effort.tier_level
        if resolved_tier is None:
            resolved_tier = tier_level if tier_level is not None else self.settings.default_tier_level
        category_value = getattr(category, "category", category)
        return DetailedCostBreakdown(
            summary=summary,
            effort_breakdown=effort,
            duration_breakdown=self.duration_from_effort(summary.effort_hours, summary.allocation_percentage),
            cost_breakdown=CostComponents(
                base_effort_cost=base_effort_cost,
                skill_adjustment_cost=summary.total_cost - base_effort_cost,
                total_cost=summary.total_cost,
                hourly_rate=rate,
            ),
            context=CostContext(
                complexity=complexity or "",
                resource_name=resource_ref,
                tier_level=resolved_tier,
                tier_label=tier_label(resolved_tier),
                category=getattr(category_value, "value", category_value),
                method=summary.method,
            ),
        )

    def three_point_estimate(
        self,
        complexity: str | None,
        complexity_settings: Mapping[str, ComplexityLevel],
    ) -> ThreePointEstimate:
        """PERT estimate in days around the complexity's nominal duration."""
        config = get_complexity_config(complexity, complexity_settings)
        if config is None:
            logger.warning("Unknown complexity level: %s", complexity)
            return ThreePointEstimate(error=f"Unknown complexity level: {complexity}")

        days = _dec(config.days)
        optimistic = int((days * self.settings.pert_optimistic_factor).to_integral_value(rounding=ROUND_FLOOR))
        pessimistic = int((days * self.settings.pert_pessimistic_factor).to_integral_value(rounding=ROUND_CEILING))
        realistic = self._round_int(days)
        expected = self._round_int(Decimal(optimistic + 4 * realistic + pessimistic) / 6)
        std = self._round_int(Decimal(pessimistic - optimistic) / 6)
        return ThreePointEstimate(
            optimistic=optimistic,
            realistic=realistic,
            pessimistic=pessimistic,
            expected=expected,
            standard_deviation=std,
            confidence_68=ConfidenceInterval(low=max(0, expected - std), high=expected + std),
            confidence_95=ConfidenceInterval(low=max(0, expected - 2 * std), high=expected + 2 * std),
        )

    def monthly_cost(self, project_cost: Any, start: DateLike, end: DateLike) -> Decimal:
        """Project cost spread over the whole months it spans (at least one)."""
        months = max(1, months_between(start, end))
        return self._round(_dec(project_cost) / Decimal(months))

    def buffered_duration(
        self,
        days: Any,
        contingency_pct: Any,
        management_reserve_pct: Any,
    ) -> BufferedValue:
        """Base days + buffer days (rounded up) + total days."""
        base = _dec(days)
        pct = (_dec(contingency_pct) + _dec(management_reserve_pct)) / Decimal(100)
        buffer = (base * pct).to_integral_value(rounding=ROUND_CEILING)
        return BufferedValue(base=base, buffer=buffer, total=base + buffer)

    def cost_with_buffers(
        self,
        base_cost: Any,
        contingency_pct: Any,
        management_reserve_pct: Any,
    ) -> BufferedValue:
        """Base cost + risk buffer + total cost."""
        base = _dec(base_cost)
        contingency = base * (_dec(contingency_pct) / Decimal(100))
        reserve = base * (_dec(management_reserve_pct) / Decimal(100))
        risk_buffer = self._round(contingency + reserve)
        return BufferedValue(base=base, buffer=risk_buffer, total=self._round(base + risk_buffer))


REQUIRED_COMPLEXITY_FIELDS = ("level", "label", "base_effort_hours")


def validate_complexity_config(config: ComplexityLevel | Mapping[str, Any]) -> ConfigValidation:
    """Check one complexity configuration for missing or out-of-range values."""
    data = config.model_dump(exclude_none=True) if isinstance(config, ComplexityLevel) else dict(config)
    errors: list[str] = []
    warnings: list[str] = []

    for field in REQUIRED_COMPLEXITY_FIELDS:
        if data.get(field) in (None, ""):
            errors.append(f"Missing required field: {field}")

    if data.get("base_effort_hours") is not None and _dec(data["base_effort_hours"]) <= 0:
        errors.append("base_effort_hours must be greater than 0")
    if data.get("complexity_multiplier") is not None and _dec(data["complexity_multiplier"]) <= 0:
        errors.append("complexity_multiplier must be greater than 0")
    for field in ("technical_complexity", "business_complexity"):
        if data.get(field) is not None and not 1 <= data[field] <= 10:
            errors.append(f"{field} must be between 1 and 10")
    if data.get("risk_factor") is not None and _dec(data["risk_factor"]) < 1:
        warnings.append("risk_factor less than 1.0 reduces effort (unusual but allowed)")
    if data.get("skill_sensitivity") is not None and not 0 <= _dec(data["skill_sensitivity"]) <= 2:
        warnings.append("skill_sensitivity outside typical range 0-2")

    return ConfigValidation(is_valid=not errors, errors=errors, warnings=warnings)
