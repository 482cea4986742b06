"""
Fallback broadening for searches that return too few results
Relaxation rules are evaluated in priority order and applied cumulatively
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from .config import SearchConfig
from .exceptions import ProviderError
from .filters import FilterSet, union_values
from .locations import NATIONWIDE, broaden_to_state, is_us_subnational
from .models import FetchResult

logger = logging.getLogger(__name__)

FetchFn = Callable[[FilterSet], Awaitable[FetchResult]]


@dataclass
class RelaxationRule:
    """A single way of loosening a filter set"""
    name: str
    description: str
    applies_when: Callable[[FilterSet], bool]
    apply: Callable[[FilterSet], FilterSet]


@dataclass
class RelaxationStep:
    level: int
    rule: str
    description: str
    filters: FilterSet
    changes: List[str] = field(default_factory=list)


@dataclass
class BroadeningOutcome:
    result: FetchResult
    filters: FilterSet
    step: Optional[RelaxationStep] = None
    attempts: int = 1

    @property
    def fallback_used(self) -> bool:
        return self.step is not None


def _states_for(locations: List[str]) -> List[str]:
    return union_values([], [broaden_to_state(location) or location for location in locations])


def _has_city(filters: FilterSet) -> bool:
    return any(broaden_to_state(location) for location in filters.locations)


def _is_subnational(filters: FilterSet) -> bool:
    return bool(filters.locations) and any(is_us_subnational(location) for location in filters.locations)


DEFAULT_RULES = [
    RelaxationRule(
        name="relax_seniority",
        description="Remove seniority filter",
        applies_when=lambda f: bool(f.seniorities),
        apply=lambda f: f.model_copy(update={"seniorities": []}),
    ),
    RelaxationRule(
        name="drop_company_size",
        description="Remove company size filter",
        applies_when=lambda f: bool(f.company_sizes),
        apply=lambda f: f.model_copy(update={"company_sizes": []}),
    ),
    RelaxationRule(
        name="reduce_job_titles",
        description="Reduce to fewer job titles",
        applies_when=lambda f: len(f.job_titles) > 2,
        apply=lambda f: f.model_copy(update={"job_titles": f.job_titles[:2]}),
    ),
    RelaxationRule(
        name="drop_industry",
        description="Remove industry filter (rely on job titles)",
        applies_when=lambda f: bool(f.industries) and bool(f.job_titles),
        apply=lambda f: f.model_copy(update={"industries": []}),
    ),
    RelaxationRule(
        name="drop_keywords",
        description="Remove keyword and technology filters",
        applies_when=lambda f: bool(f.keywords) or bool(f.technologies),
        apply=lambda f: f.model_copy(update={"keywords": [], "technologies": []}),
    ),
    RelaxationRule(
        name="city_to_state",
        description="Broaden location from city to state",
        applies_when=_has_city,
        apply=lambda f: f.model_copy(update={"locations": _states_for(f.locations)}),
    ),
    RelaxationRule(
        name="nationwide",
        description="Broaden location to nationwide (United States)",
        applies_when=_is_subnational,
        apply=lambda f: f.model_copy(update={"locations": [NATIONWIDE]}),
    ),
    RelaxationRule(
        name="drop_location",
        description="Remove location filter",
        applies_when=lambda f: bool(f.locations) and bool(f.job_titles),
        apply=lambda f: f.model_copy(update={"locations": []}),
    ),
]


def describe_changes(before: FilterSet, after: FilterSet) -> List[str]:
    """Field-level description of what a relaxation changed"""
    changes = []
    if before.job_titles != after.job_titles:
        changes.append(f"Job titles: {len(before.job_titles)} → {len(after.job_titles)}")
    if before.locations != after.locations:
        if after.locations:
            changes.append(f"Locations: {', '.join(before.locations)} → {', '.join(after.locations)}")
        else:
            changes.append(f"Removed locations: {', '.join(before.locations)}")
    if before.industries != after.industries:
        changes.append(f"Removed industries: {', '.join(before.industries)}")
    if before.seniorities != after.seniorities:
        changes.append(f"Removed seniorities: {', '.join(before.seniorities)}")
    if before.company_sizes != after.company_sizes:
        changes.append(f"Removed company sizes: {', '.join(before.company_sizes)}")
    if before.keywords != after.keywords:
        changes.append(f"Removed keywords: {', '.join(before.keywords)}")
    if before.technologies != after.technologies:
        changes.append(f"Removed technologies: {', '.join(before.technologies)}")
    return changes


class FallbackBroadener:
    """Re-queries with progressively relaxed filters until results are useful"""

    def __init__(
        self,
        rules: Optional[List[RelaxationRule]] = None,
        min_useful_results: Optional[int] = None,
        good_enough_results: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        self.rules = rules if rules is not None else DEFAULT_RULES
        self.min_useful_results = (
            min_useful_results if min_useful_results is not None else SearchConfig.MIN_USEFUL_RESULTS
        )
        self.good_enough_results = (
            good_enough_results if good_enough_results is not None else SearchConfig.GOOD_ENOUGH_RESULTS
        )
        self.max_attempts = max_attempts if max_attempts is not None else SearchConfig.MAX_SEARCH_ATTEMPTS

    def should_broaden(self, result: FetchResult) -> bool:
        return result.pagination.total_results < self.min_useful_results

    def plan(self, filters: FilterSet) -> List[RelaxationStep]:
        """
        Build the relaxation sequence for a filter set

        Each step is derived from the previous one, so later steps
        carry every earlier relaxation as well.
        """
        steps = []
        current = filters
        for rule in self.rules:
            if not rule.applies_when(current):
                continue
            relaxed = rule.apply(current)
            changes = describe_changes(current, relaxed)
            if not changes:
                continue
            steps.append(RelaxationStep(
                level=len(steps) + 1,
                rule=rule.name,
                description=rule.description,
                filters=relaxed,
                changes=changes,
            ))
            current = relaxed
        return steps

    async def broaden(self, filters: FilterSet, initial: FetchResult, fetch: FetchFn) -> BroadeningOutcome:
        """
        Retry with relaxed filters when the initial result is too small

        Args:
            filters: Filters used for the initial query
            initial: Result of the initial query
            fetch: Coroutine function running one provider query

        Returns:
            BroadeningOutcome holding the best result seen and the step that produced it
        """
        outcome = BroadeningOutcome(result=initial, filters=filters)
        if not self.should_broaden(initial):
            return outcome

        best_total = initial.pagination.total_results
        for step in self.plan(filters):
            if outcome.attempts >= self.max_attempts:
                break

            try:
                result = await fetch(step.filters)
            except ProviderError as e:
                logger.warning(f"Fallback level {step.level} failed, keeping best result so far: {e}")
                break
            outcome.attempts += 1

            total = result.pagination.total_results
            logger.info(f"Fallback level {step.level} ({step.rule}): {total} results")
            if total > best_total:
                best_total = total
                outcome.result = result
                outcome.filters = step.filters
                outcome.step = step
                if total >= self.good_enough_results:
                    break

        if outcome.fallback_used:
            logger.info(f"Broadened search to level {outcome.step.level} after {outcome.attempts} attempts")
        return outcome
