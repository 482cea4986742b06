"""
Unit tests for fallback broadening and location normalization
"""
import asyncio
import pytest
from unittest.mock import AsyncMock

from src.search.broadening import DEFAULT_RULES, FallbackBroadener, RelaxationRule, describe_changes
from src.search.exceptions import ProviderError
from src.search.filters import FilterSet
from src.search.locations import broaden_to_state, is_us_subnational, normalize_location

from helpers import make_fetch_result

@pytest.fixture
def narrow_filters():
    return FilterSet(
        job_titles=["VP of Sales", "Head of Sales", "Sales Director", "CRO"],
        locations=["Austin"],
        seniorities=["VP"],
        industries=["Banking"]
    )

def run_broaden(broadener, filters, initial, fetch):
    return asyncio.run(broadener.broaden(filters, initial, fetch))

class TestPlan:
    """Test relaxation ordering"""

    def test_rules_in_priority_order(self):
        assert [rule.name for rule in DEFAULT_RULES] == [
            "relax_seniority",
            "drop_company_size",
            "reduce_job_titles",
            "drop_industry",
            "drop_keywords",
            "city_to_state",
            "nationwide",
            "drop_location",
        ]

    def test_plan_skips_inapplicable_rules_and_accumulates(self, narrow_filters):
        steps = FallbackBroadener().plan(narrow_filters)

        assert [step.rule for step in steps] == [
            "relax_seniority", "reduce_job_titles", "drop_industry",
            "city_to_state", "nationwide", "drop_location"
        ]
        assert [step.level for step in steps] == [1, 2, 3, 4, 5, 6]
        assert steps[1].filters.seniorities == []
        assert steps[3].filters.locations == ["Texas"]
        assert steps[3].filters.job_titles == ["VP of Sales", "Head of Sales"]
        assert steps[3].changes == ["Locations: Austin → Texas"]
        assert steps[4].filters.locations == ["United States"]
        assert steps[5].filters.locations == []

    def test_location_is_kept_without_titles(self):
        steps = FallbackBroadener().plan(FilterSet(industries=["Banking"], locations=["Ohio"]))
        assert [step.rule for step in steps] == ["nationwide"]

    def test_rule_without_effect_is_skipped(self):
        noop = RelaxationRule(
            name="noop", description="Does nothing",
            applies_when=lambda f: True, apply=lambda f: f
        )
        assert FallbackBroadener(rules=[noop]).plan(FilterSet(job_titles=["CFO"])) == []

    def test_describe_changes(self):
        before = FilterSet(job_titles=["A", "B", "C"], industries=["Banking"], locations=["Ohio"])
        after = FilterSet(job_titles=["A"], locations=[])

        assert describe_changes(before, after) == [
            "Job titles: 3 → 1",
            "Removed locations: Ohio",
            "Removed industries: Banking",
        ]

class TestBroaden:
    """Test broadening execution"""

    def test_enough_results_skip_broadening(self, narrow_filters):
        fetch = AsyncMock()
        outcome = run_broaden(FallbackBroadener(), narrow_filters, make_fetch_result(5), fetch)

        fetch.assert_not_called()
        assert outcome.fallback_used is False
        assert outcome.attempts == 1

    def test_zero_threshold_disables_broadening(self, narrow_filters):
        fetch = AsyncMock()
        broadener = FallbackBroadener(min_useful_results=0)

        outcome = run_broaden(broadener, narrow_filters, make_fetch_result(0), fetch)

        assert broadener.min_useful_results == 0
        fetch.assert_not_called()
        assert outcome.attempts == 1

    def test_explicit_limits_are_kept(self):
        broadener = FallbackBroadener(good_enough_results=0, max_attempts=1)

        assert broadener.good_enough_results == 0
        assert broadener.max_attempts == 1

    def test_at_most_five_queries_in_total(self, narrow_filters):
        fetch = AsyncMock(return_value=make_fetch_result(0))

        outcome = run_broaden(FallbackBroadener(), narrow_filters, make_fetch_result(0), fetch)

        assert fetch.await_count == 4
        assert outcome.attempts == 5
        assert outcome.fallback_used is False

    def test_fewer_titles_step_is_reported(self):
        filters = FilterSet(
            job_titles=["VP of Sales", "Head of Sales", "Sales Director", "CRO"],
            locations=["Austin"]
        )

        async def fetch(relaxed):
            return make_fetch_result(12 if len(relaxed.job_titles) == 2 else 0)

        outcome = run_broaden(FallbackBroadener(), filters, make_fetch_result(0), fetch)

        assert outcome.fallback_used is True
        assert outcome.step.level == 1
        assert outcome.step.description == "Reduce to fewer job titles"
        assert outcome.step.changes == ["Job titles: 4 → 2"]
        assert outcome.filters.job_titles == ["VP of Sales", "Head of Sales"]
        assert outcome.attempts == 2

    def test_only_strict_improvements_are_kept(self, narrow_filters):
        fetch = AsyncMock(side_effect=[make_fetch_result(3), make_fetch_result(2), make_fetch_result(6),
                                       make_fetch_result(6)])
        initial = make_fetch_result(3)

        outcome = run_broaden(FallbackBroadener(), narrow_filters, initial, fetch)

        assert outcome.step.level == 3
        assert outcome.result.pagination.total_results == 6

    def test_stops_at_good_enough(self, narrow_filters):
        fetch = AsyncMock(side_effect=[make_fetch_result(4), make_fetch_result(10)])

        outcome = run_broaden(FallbackBroadener(), narrow_filters, make_fetch_result(1), fetch)

        assert fetch.await_count == 2
        assert outcome.step.level == 2

    def test_provider_error_keeps_best_so_far(self, narrow_filters):
        fetch = AsyncMock(side_effect=[make_fetch_result(3), ProviderError("rate limited", status_code=429)])
        initial = make_fetch_result(1)

        outcome = run_broaden(FallbackBroadener(), narrow_filters, initial, fetch)

        assert outcome.step.level == 1
        assert outcome.result.pagination.total_results == 3
        assert outcome.attempts == 2

    def test_nothing_to_relax(self):
        fetch = AsyncMock()
        filters = FilterSet(companies=["Acme"])

        outcome = run_broaden(FallbackBroadener(), filters, make_fetch_result(0), fetch)

        fetch.assert_not_called()
        assert outcome.filters == filters

class TestLocations:
    """Test location normalization helpers"""

    @pytest.mark.parametrize("value,city,state", [
        ("Austin", "Austin", "Texas"),
        ("Austin, TX", "Austin", "Texas"),
        ("austin, texas, united states", "Austin", "Texas"),
        ("San Francisco", "San Francisco", "California"),
    ])
    def test_city_locations(self, value, city, state):
        location = normalize_location(value)
        assert location.city == city
        assert location.state == state
        assert location.country == "United States"

    def test_state_and_country(self):
        assert normalize_location("TX").state == "Texas"
        assert normalize_location("Texas, USA").state == "Texas"
        assert normalize_location("USA").country == "United States"
        assert normalize_location("Atlantis").state is None

    def test_broaden_to_state(self):
        assert broaden_to_state("Denver") == "Colorado"
        assert broaden_to_state("Colorado") is None
        assert broaden_to_state("Berlin") is None

    def test_is_us_subnational(self):
        assert is_us_subnational("Ohio")
        assert is_us_subnational("Cleveland, OH")
        assert not is_us_subnational("United States")
        assert not is_us_subnational("Germany")
