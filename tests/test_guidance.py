"""
Unit tests for adaptive guidance and suggestions
"""
import pytest

from src.models.icp import BestPerformingAttributes, IcpProfile
from src.search.filters import FilterSet
from src.search.guidance import (
    build_clarifying_questions, build_guidance, build_suggestions, generate_profile_suggestions
)

@pytest.fixture
def confident_profile():
    return IcpProfile(
        user_id=1,
        icp_confidence=0.8,
        total_data_points=40,
        best_performing_attributes=BestPerformingAttributes(
            top_titles=["CFO", "Controller"],
            top_industries=["Banking"],
            top_company_sizes=["51-200"],
            top_locations=["Texas"]
        )
    )

class TestGuidance:
    """Test tips and ICP-based additions"""

    def test_missing_signals_produce_add_filter_tips(self):
        guidance = build_guidance(FilterSet(industries=["Banking"]), "industry_only", 0.15,
                                  ["job_title", "location", "company", "seniority"])

        assert [tip.suggested_filter for tip in guidance.tips if tip.type == "add_filter"] == [
            "jobTitles", "locations"
        ]
        assert guidance.has_recommendations is True
        assert guidance.suggested_additions == []

    def test_icp_additions_for_missing_fields(self, confident_profile):
        guidance = build_guidance(FilterSet(job_titles=["CEO"]), "job_only", 0.35,
                                  ["location", "company", "industry", "seniority"], confident_profile)

        fields = {addition.field for addition in guidance.suggested_additions}
        assert fields == {"locations", "industries", "companySizes"}
        assert all(addition.source == "icp" for addition in guidance.suggested_additions)

    def test_low_confidence_profile_adds_nothing(self, confident_profile):
        confident_profile.icp_confidence = 0.1
        guidance = build_guidance(FilterSet(job_titles=["CEO"]), "job_only", 0.35,
                                  ["location"], confident_profile)
        assert guidance.suggested_additions == []

    def test_complete_search_gets_info_tip(self):
        guidance = build_guidance(FilterSet(job_titles=["CEO"], locations=["Ohio"]), "complete", 0.5,
                                  ["company", "industry", "seniority"])
        assert any(tip.type == "info" for tip in guidance.tips)

    def test_clarifying_questions_limit(self):
        questions = build_clarifying_questions(["job_title", "location", "industry", "company"])
        assert len(questions) == 3

class TestSuggestions:
    """Test follow-up search suggestions"""

    def test_large_result_sets_suggest_seniority(self):
        suggestions = build_suggestions(FilterSet(job_titles=["CEO"]), 60, 1200, None, False)
        assert suggestions[0].text == "Narrow down: Add seniority filter"
        assert suggestions[0].filters == {"seniorities": ["Senior", "Director", "VP"]}

    def test_zero_results_with_many_titles_suggest_fewer(self):
        filters = FilterSet(job_titles=["A", "B", "C", "D"])
        suggestions = build_suggestions(filters, 0, 0, None, False)

        assert suggestions[0].text == "Broaden search: Use fewer job titles"
        assert suggestions[0].filters == {"jobTitles": ["A", "B"]}

    def test_zero_results_otherwise_suggest_removing_filter(self):
        suggestions = build_suggestions(FilterSet(job_titles=["CEO"], locations=["Ohio"]), 0, 0, None, False)
        assert suggestions[0].text == "Broaden search: Remove a filter"

    def test_icp_suggestions_capped_at_two(self, confident_profile):
        assert len(generate_profile_suggestions(confident_profile)) == 3
        suggestions = build_suggestions(FilterSet(job_titles=["CEO"]), 10, 10, confident_profile, True)
        assert len(suggestions) == 2
