"""
Adaptive search guidance
Clarifying questions, tips, ICP-based additions and follow-up suggestions
"""

from typing import List, Optional

from .config import SearchConfig
from .filters import FilterSet
from .models import AdaptiveGuidance, GuidanceTip, SuggestedAddition, Suggestion
from ..models.icp import IcpProfile, ProfileSuggestion

CLARIFYING_QUESTIONS = {
    "job_title": "What role or job title are you looking for?",
    "location": "Which city, state or country should we search in?",
    "industry": "Which industry should these companies be in?",
    "company": "Are there specific companies you want to target?",
    "seniority": "What seniority level should they have?",
}


def build_clarifying_questions(missing_signals: List[str], limit: int = 3) -> List[str]:
    """Questions for the most important missing signals"""
    questions = [CLARIFYING_QUESTIONS[signal] for signal in missing_signals if signal in CLARIFYING_QUESTIONS]
    return questions[:limit]


def profile_is_usable(profile: Optional[IcpProfile]) -> bool:
    return profile is not None and profile.icp_confidence >= SearchConfig.ICP_MIN_CONFIDENCE


def build_guidance(
    filters: FilterSet,
    search_category: str,
    specificity_score: float,
    missing_signals: List[str],
    profile: Optional[IcpProfile] = None,
) -> AdaptiveGuidance:
    """
    Build tips and suggested filter additions for a search

    Args:
        filters: Interpreted filters
        search_category: Category from the specificity analysis
        specificity_score: Score from the specificity analysis
        missing_signals: Signal types absent from the filters
        profile: Learned ICP profile, if any

    Returns:
        AdaptiveGuidance for the response
    """
    tips: List[GuidanceTip] = []

    if "job_title" in missing_signals:
        tips.append(GuidanceTip(
            type="add_filter",
            message="Add a job title to focus on the people you want to reach",
            suggested_filter="jobTitles",
        ))
    if "location" in missing_signals and search_category != "company_only":
        tips.append(GuidanceTip(
            type="add_filter",
            message="Add a location to narrow results to your market",
            suggested_filter="locations",
        ))
    if search_category == "job_only" and "industry" in missing_signals:
        tips.append(GuidanceTip(
            type="refine",
            message="Adding an industry usually improves match quality",
            suggested_filter="industries",
        ))
    if len(filters.job_titles) > 5:
        tips.append(GuidanceTip(
            type="refine",
            message=f"{len(filters.job_titles)} job titles are included; removing some sharpens results",
            suggested_filter="jobTitles",
        ))
    if search_category == "complete":
        tips.append(GuidanceTip(
            type="info",
            message="Role and context are both set, so results should be precise",
        ))

    additions: List[SuggestedAddition] = []
    if profile_is_usable(profile):
        best = profile.best_performing_attributes
        if "job_title" in missing_signals and best.top_titles:
            additions.append(SuggestedAddition(
                field="jobTitles", values=best.top_titles[:3], source="icp",
                label="Titles that respond best to your outreach",
            ))
        if "location" in missing_signals and best.top_locations:
            additions.append(SuggestedAddition(
                field="locations", values=best.top_locations[:3], source="icp",
                label="Your best-performing locations",
            ))
        if "industry" in missing_signals and best.top_industries:
            additions.append(SuggestedAddition(
                field="industries", values=best.top_industries[:3], source="icp",
                label="Your best-performing industries",
            ))
        if not filters.company_sizes and best.top_company_sizes:
            additions.append(SuggestedAddition(
                field="companySizes", values=best.top_company_sizes[:3], source="icp",
                label="Company sizes that convert for you",
            ))

    return AdaptiveGuidance(
        search_category=search_category,
        specificity_score=specificity_score,
        tips=tips,
        suggested_additions=additions,
        has_recommendations=bool(tips or additions),
    )


def generate_profile_suggestions(profile: IcpProfile) -> List[ProfileSuggestion]:
    """Search ideas drawn from the profile's best-performing attributes"""
    best = profile.best_performing_attributes
    suggestions = []
    if best.top_titles:
        suggestions.append(ProfileSuggestion(
            description=f"Try your top-performing titles: {', '.join(best.top_titles[:3])}",
            filters={"jobTitles": best.top_titles[:3]},
            reasoning="These titles engage most with your outreach",
        ))
    if best.top_industries:
        suggestions.append(ProfileSuggestion(
            description=f"Focus on {', '.join(best.top_industries[:2])}",
            filters={"industries": best.top_industries[:2]},
            reasoning="Leads in these industries reply most often",
        ))
    if best.top_locations:
        suggestions.append(ProfileSuggestion(
            description=f"Search in {', '.join(best.top_locations[:2])}",
            filters={"locations": best.top_locations[:2]},
            reasoning="Your outreach performs best in these locations",
        ))
    return suggestions


def build_suggestions(
    filters: FilterSet,
    lead_count: int,
    total_results: int,
    profile: Optional[IcpProfile],
    icp_enabled: bool,
) -> List[Suggestion]:
    """Follow-up search suggestions for a completed search"""
    suggestions: List[Suggestion] = []

    if icp_enabled and profile is not None:
        for item in generate_profile_suggestions(profile)[:2]:
            suggestions.append(Suggestion(text=item.description, filters=item.filters, reasoning=item.reasoning))

    if lead_count > SearchConfig.NARROW_DOWN_THRESHOLD:
        suggestions.append(Suggestion(
            text="Narrow down: Add seniority filter",
            filters={"seniorities": ["Senior", "Director", "VP"]},
            reasoning=f"{total_results} results found - try adding seniority to focus",
        ))

    if lead_count == 0 and len(filters.job_titles) > SearchConfig.BROADEN_TITLE_THRESHOLD:
        suggestions.append(Suggestion(
            text="Broaden search: Use fewer job titles",
            filters={"jobTitles": filters.job_titles[:2]},
            reasoning="No results - try using fewer specific titles",
        ))
    elif lead_count == 0 and not filters.is_empty():
        suggestions.append(Suggestion(
            text="Broaden search: Remove a filter",
            filters={},
            reasoning=f"No results for {filters.active_filter_count()} combined filters - try dropping location or company size",
        ))

    return suggestions
