"""
Unit tests for specificity analysis and result count estimation
"""
import pytest

from src.search.filters import FilterSet
from src.search.specificity import (
    adjust_per_page, analyze_specificity, estimate_result_count, is_minimum_viable_search
)

class TestAnalyzeSpecificity:
    """Test weighted specificity scoring"""

    def test_weights(self):
        assert analyze_specificity(FilterSet(job_titles=["CEO"])).score == 0.35
        assert analyze_specificity(FilterSet(job_titles=["CEO"], companies=["Acme"])).score == 0.6
        full = FilterSet(
            job_titles=["CEO"], companies=["Acme"], locations=["Ohio"],
            industries=["Banking"], seniorities=["VP"]
        )
        assert analyze_specificity(full).score == 1.0

    @pytest.mark.parametrize("filters,category", [
        (FilterSet(job_titles=["CEO"], locations=["Ohio"]), "complete"),
        (FilterSet(job_titles=["CEO"], companies=["Acme"]), "complete"),
        (FilterSet(job_titles=["CEO"]), "job_only"),
        (FilterSet(companies=["Acme"], locations=["Ohio"]), "company_only"),
        (FilterSet(industries=["Banking"]), "industry_only"),
        (FilterSet(locations=["Ohio"]), "location_only"),
        (FilterSet(keywords=["crm"]), "vague"),
    ])
    def test_categories(self, filters, category):
        assert analyze_specificity(filters).category == category

    def test_missing_signals_in_priority_order(self):
        result = analyze_specificity(FilterSet(locations=["Ohio"]))
        assert result.missing_signals == ["job_title", "company", "industry", "seniority"]

class TestMinimumViableSearch:
    """Test the clarification gate"""

    def test_title_with_location_or_industry(self):
        assert is_minimum_viable_search(FilterSet(job_titles=["CEO"], locations=["Ohio"]), 0.5)
        assert is_minimum_viable_search(FilterSet(job_titles=["CEO"], industries=["Banking"]), 0.5)

    def test_named_company_is_self_sufficient(self):
        assert is_minimum_viable_search(FilterSet(companies=["Acme"]), 0.25)

    def test_lone_title_depends_on_score(self):
        assert not is_minimum_viable_search(FilterSet(job_titles=["CEO"]), 0.35)
        assert is_minimum_viable_search(FilterSet(job_titles=["CEO"]), 0.5)

    def test_location_alone_is_not_viable(self):
        assert not is_minimum_viable_search(FilterSet(locations=["Ohio"]), 0.15)

class TestResultCountEstimation:
    """Test restrictiveness estimation and page sizing"""

    def test_empty_filters_estimate_high(self):
        assert estimate_result_count(FilterSet()) == "high"

    def test_single_title_estimates_high(self):
        assert estimate_result_count(FilterSet(job_titles=["CEO"])) == "high"

    def test_stacked_narrow_filters_estimate_zero(self):
        filters = FilterSet(
            job_titles=["CEO"], companies=["Acme"], locations=["Ohio"], industries=["Banking"]
        )
        assert estimate_result_count(filters) == "zero"

    def test_adjust_per_page(self):
        assert adjust_per_page(25, "low") == 10
        assert adjust_per_page(25, "zero") == 10
        assert adjust_per_page(25, "medium") == 25
        assert adjust_per_page(25, "high") == 50
        assert adjust_per_page(200, "high") == 100
