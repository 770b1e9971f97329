"""Re-derive allocation plan figures after costs, complexity or calendars change."""
import logging
from decimal import Decimal
from typing import Iterable, Mapping

from resplan.engine.calendar import plan_end_date
from resplan.engine.capacity import find_member
from resplan.engine.effort import EffortCostModel
from resplan.models.allocation import Allocation
from resplan.models.calendar import Holiday, LeaveRecord
from resplan.models.complexity import Category, ComplexityLevel, TaskTemplate, is_project_category
from resplan.models.team import ResourceCostTier, TeamMember

logger = logging.getLogger(__name__)


def _template_named(name: str | None, task_templates: Iterable[TaskTemplate]) -> TaskTemplate | None:
    if not name:
        return None
    key = name.strip().lower()
    for template in task_templates:
        if template.name.strip().lower() == key:
            return template
    return None


def recalculate_allocations(
    allocations: Iterable[Allocation],
    complexity_settings: Mapping[str, ComplexityLevel],
    resource_costs: Iterable[ResourceCostTier],
    task_templates: Iterable[TaskTemplate] = (),
    holidays: Iterable[Holiday] = (),
    leaves: Iterable[LeaveRecord] = (),
    members: Iterable[TeamMember] = (),
    model: EffortCostModel | None = None,
) -> list[Allocation]:
    """Fresh copies of allocations with plan end date, project cost and monthly cost filled in.

    Allocations without a plan start, resource or complexity come back as
    they are. Only Project work carries a cost. When the task name matches a
    template with a percentage for the complexity, the workload is refreshed
    from it. The input allocations are never modified.
    """
    model = model or EffortCostModel()
    resource_costs = list(resource_costs)
    task_templates = list(task_templates)
    holidays = list(holidays)
    leaves = list(leaves)
    members = list(members)

    results = []
    for allocation in allocations:
        start = allocation.plan.task_start
        if start is None or not allocation.resource or not allocation.complexity:
            results.append(allocation)
            continue

        category = allocation.category or Category.PROJECT
        task_end = plan_end_date(
            start,
            allocation.complexity,
            allocation.resource,
            holidays,
            leaves,
            complexity_settings,
            category=category,
            capacity_factor=model.settings.capacity_factor,
            half_day_weight=model.settings.half_day_weight,
        )

        cost_project = Decimal(0)
        if is_project_category(category):
            member = find_member(allocation.resource, members)
            cost_ref = member.cost_tier_id if member is not None and member.cost_tier_id else allocation.resource
            estimate = model.project_cost(
                allocation.complexity,
                cost_ref,
                complexity_settings,
                resource_costs,
                category=category,
            )
            if estimate.error:
                logger.warning("Allocation %s costed at zero: %s", allocation.id, estimate.error)
            cost_project = estimate.total_cost

        update = {
            "plan": allocation.plan.model_copy(
                update={
                    "task_end": task_end,
                    "cost_project": cost_project,
                    "cost_monthly": model.monthly_cost(cost_project, start, task_end),
                }
            )
        }
        template = _template_named(allocation.task_name, task_templates)
        if template is not None:
            estimate_for_level = template.estimates.get(allocation.complexity.lower())
            if estimate_for_level is not None and estimate_for_level.percentage is not None:
                update["workload"] = estimate_for_level.percentage
        results.append(allocation.model_copy(update=update))

    logger.debug("Recalculated %d allocation(s)", len(results))
    return results
