"""
Specificity analysis for filter sets
Scores how searchable a filter set is, independent of extraction confidence
"""

from dataclasses import dataclass, field
from typing import List

from .config import SearchConfig
from .filters import FilterSet

SPECIFICITY_WEIGHTS = {
    "job_titles": 0.35,
    "companies": 0.25,
    "locations": 0.15,
    "industries": 0.15,
    "seniorities": 0.10,
}

# Filter field -> signal name reported when the field is empty
SIGNAL_FIELDS = [
    ("job_titles", "job_title"),
    ("locations", "location"),
    ("companies", "company"),
    ("industries", "industry"),
    ("seniorities", "seniority"),
]


@dataclass
class SpecificityResult:
    score: float
    category: str
    missing_signals: List[str] = field(default_factory=list)
    filter_count: int = 0


def analyze_specificity(filters: FilterSet) -> SpecificityResult:
    """
    Score a filter set in [0, 1] and classify it

    Args:
        filters: Filter set to analyze

    Returns:
        SpecificityResult with score, category, missing signals and filter count
    """
    score = sum(
        weight for field_name, weight in SPECIFICITY_WEIGHTS.items()
        if getattr(filters, field_name)
    )
    missing = [signal for field_name, signal in SIGNAL_FIELDS if not getattr(filters, field_name)]

    has_titles = bool(filters.job_titles)
    if has_titles and (filters.locations or filters.industries or filters.companies):
        category = "complete"
    elif has_titles:
        category = "job_only"
    elif filters.companies:
        category = "company_only"
    elif filters.industries:
        category = "industry_only"
    elif filters.locations:
        category = "location_only"
    else:
        category = "vague"

    return SpecificityResult(
        score=round(min(score, 1.0), 2),
        category=category,
        missing_signals=missing,
        filter_count=filters.active_filter_count(),
    )


def is_minimum_viable_search(filters: FilterSet, specificity_score: float) -> bool:
    """Whether a filter set can be searched without asking for clarification"""
    has_titles = bool(filters.job_titles)
    return (
        (has_titles and bool(filters.locations))
        or (has_titles and bool(filters.industries))
        or bool(filters.companies)
        or (has_titles and specificity_score >= 0.5)
    )


def estimate_result_count(filters: FilterSet) -> str:
    """Rough expected result volume: zero, low, medium or high"""
    if filters.is_empty():
        return "high"

    restrictiveness = 0
    if filters.job_titles:
        restrictiveness += 2 if len(filters.job_titles) > 5 else 1
    if filters.locations:
        restrictiveness += 2 if len(filters.locations) == 1 else 1
    if filters.industries:
        restrictiveness += 2 if len(filters.industries) == 1 else 1
    if filters.company_sizes:
        restrictiveness += 1
    if filters.companies:
        restrictiveness += 3
    if filters.seniorities:
        restrictiveness += 2 if len(filters.seniorities) == 1 else 1
    if len(filters.email_statuses) == 1:
        restrictiveness += 1
    if filters.previous_companies:
        restrictiveness += 2
    if filters.schools:
        restrictiveness += 2

    if restrictiveness >= 8:
        return "zero"
    if restrictiveness >= 6:
        return "low"
    if restrictiveness >= 4:
        return "medium"
    return "high"


def adjust_per_page(per_page: int, estimate: str) -> int:
    """Shrink the page for narrow searches, grow it for broad ones"""
    if estimate in ("low", "zero"):
        return min(per_page, SearchConfig.LOW_ESTIMATE_PER_PAGE)
    if estimate == "high":
        return min(max(per_page, SearchConfig.HIGH_ESTIMATE_PER_PAGE), SearchConfig.MAX_PER_PAGE)
    return per_page
