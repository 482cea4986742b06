"""
Unit tests for query interpretation
"""
import asyncio
import pytest

from src.search.exceptions import ExtractionError
from src.search.filters import COMPANY_SIZES, INDUSTRIES, REVENUE_RANGES, SENIORITY_LEVELS
from src.search.expansion import expand_job_title, preprocess_query
from src.search.interpreter import QueryInterpreter

from helpers import FakeExtractor, extraction

def interpret(extractor, query):
    return asyncio.run(QueryInterpreter(extractor).interpret(query))

class TestEndToEndQueries:
    """Test representative queries through a fake extractor"""

    def test_role_and_city_query_proceeds(self):
        extractor = FakeExtractor({
            "VP of Sales in Austin": extraction({"jobTitles": ["VP of Sales"], "locations": ["Austin"]})
        })

        parsed = interpret(extractor, "VP of Sales in Austin")

        assert "VP of Sales" in parsed.filters.job_titles
        assert "Austin" in parsed.filters.locations
        assert parsed.needs_clarification is False
        assert parsed.search_category == "complete"
        assert parsed.query_type == "specific"

    def test_vague_query_asks_for_clarification(self):
        extractor = FakeExtractor()

        parsed = interpret(extractor, "people")

        assert parsed.needs_clarification is True
        assert len(parsed.clarifying_questions) >= 1
        assert parsed.search_category == "vague"

class TestValidation:
    """Test canonical option list validation and expansion"""

    @pytest.fixture
    def messy_payload(self):
        return extraction({
            "jobTitles": ["CTO", 42, "  "],
            "industries": ["Tech", "Underwater Basket Weaving", "banking"],
            "companySizes": ["startup", "11-50", "huge"],
            "seniorities": ["vp", "senior", "galactic"],
            "revenueRanges": ["$1M-10M", "lots"],
            "emailStatuses": ["Verified", "bogus"],
            "companies": ["FAANG"],
            "recentJobChange": "yes"
        })

    def test_enum_values_are_canonical(self, messy_payload):
        parsed = interpret(FakeExtractor({"q": messy_payload}), "q")
        filters = parsed.filters

        assert filters.industries
        assert all(value in INDUSTRIES for value in filters.industries)
        assert all(value in COMPANY_SIZES for value in filters.company_sizes)
        assert all(value in SENIORITY_LEVELS for value in filters.seniorities)
        assert all(value in REVENUE_RANGES for value in filters.revenue_ranges)

    def test_unknown_values_are_dropped(self, messy_payload):
        filters = interpret(FakeExtractor({"q": messy_payload}), "q").filters

        assert "Underwater Basket Weaving" not in filters.industries
        assert "huge" not in filters.company_sizes
        assert filters.revenue_ranges == ["$1M-10M"]
        assert filters.email_statuses == ["verified"]
        assert filters.recent_job_change is False

    def test_expansion_rules(self, messy_payload):
        filters = interpret(FakeExtractor({"q": messy_payload}), "q").filters

        assert "Banking" in filters.industries
        assert "Computer Software" in filters.industries
        assert filters.company_sizes == ["1-10", "11-50"]
        assert filters.seniorities == ["Senior", "VP"]
        assert filters.companies == ["Meta", "Apple", "Amazon", "Netflix", "Google"]
        assert "Chief Technology Officer" in filters.job_titles

    def test_broad_occupation_expands_to_ownership_titles(self):
        payload = extraction({"jobTitles": ["plumbers"], "locations": ["Denver"]})
        parsed = interpret(FakeExtractor({"q": payload}), "q")

        assert "Master Plumber" in parsed.filters.job_titles
        assert "Owner" in parsed.filters.job_titles
        assert parsed.expanded_from_original is True

class TestClarificationGating:
    """Test minimum viable search gating"""

    @pytest.mark.parametrize("filters", [
        {"jobTitles": ["Chief Architect"], "locations": ["Ohio"]},
        {"jobTitles": ["Chief Architect"], "industries": ["Banking"]},
        {"companies": ["Stripe"]},
    ])
    def test_viable_searches_never_need_clarification(self, filters):
        payload = extraction(filters, confidence=0.05, specificity="low")
        parsed = interpret(FakeExtractor({"q": payload}), "q")
        assert parsed.needs_clarification is False

    def test_low_confidence_single_signal_needs_clarification(self):
        payload = extraction({"locations": ["Ohio"]}, confidence=0.3, specificity="medium")
        parsed = interpret(FakeExtractor({"q": payload}), "q")

        assert parsed.needs_clarification is True
        assert "What role or job title are you looking for?" in parsed.clarifying_questions

    def test_extractor_questions_are_kept(self):
        payload = extraction({}, specificity="low")
        payload["classification"]["suggestedClarifications"] = ["Which market?"]
        parsed = interpret(FakeExtractor({"q": payload}), "q")
        assert parsed.clarifying_questions == ["Which market?"]

    def test_ambiguous_role_adds_question_but_proceeds(self):
        payload = extraction({"jobTitles": ["developer"], "locations": ["Austin"]})
        parsed = interpret(FakeExtractor({"q": payload}), "q")

        assert parsed.needs_clarification is False
        assert "Do you mean software developers or real estate developers?" in parsed.clarifying_questions

class TestFailureModes:
    """Test graceful degradation"""

    def test_extractor_error_degrades(self):
        parsed = interpret(FakeExtractor(error=ExtractionError("timeout")), "CFOs in Boston")

        assert parsed.filters.is_empty()
        assert parsed.confidence == 0.3
        assert parsed.needs_clarification is True
        assert parsed.explanation == "Failed to parse query"
        assert parsed.missing_signals == ["job_title", "location"]

    @pytest.mark.parametrize("payload", [
        "not json",
        ["a", "list"],
        {"filters": ["wrong", "shape"]},
    ])
    def test_malformed_payload_degrades(self, payload):
        parsed = interpret(FakeExtractor({"q": payload}), "q")
        assert parsed.confidence == 0.3
        assert parsed.needs_clarification is True

    def test_empty_query_short_circuits(self):
        extractor = FakeExtractor()
        parsed = interpret(extractor, "   ")
        assert parsed.needs_clarification is True
        assert extractor.calls == []

    def test_confidence_defaults_and_caps(self):
        missing = extraction({"companies": ["Stripe"]})
        del missing["confidence"]
        too_high = extraction({"companies": ["Stripe"]}, confidence=7)

        assert interpret(FakeExtractor({"q": missing}), "q").confidence == 0.5
        assert interpret(FakeExtractor({"q": too_high}), "q").confidence == 1.0

class TestPreprocessing:
    """Test query cleanup before extraction"""

    def test_noise_and_misspellings_are_cleaned(self):
        cleaned, corrections = preprocess_query("Find me   marketting managers in Austin.")

        assert cleaned == "marketing managers in Austin."
        assert corrections == ["marketting -> marketing"]

    def test_compound_misspelling(self):
        cleaned, _ = preprocess_query("realestate agents in Miami")
        assert cleaned == "real estate agents in Miami"

    def test_request_phrase_alone_is_kept(self):
        assert preprocess_query("find")[0] == "find"

    def test_extractor_sees_cleaned_query(self):
        extractor = FakeExtractor({
            "plumbers in Ohio": extraction({"jobTitles": ["plumbers"], "locations": ["Ohio"]})
        })

        parsed = interpret(extractor, "looking for plumers in  Ohio")

        assert extractor.calls == ["plumbers in Ohio"]
        assert "Master Plumber" in parsed.filters.job_titles
        assert parsed.needs_clarification is False

    def test_misspelled_title_still_expands(self):
        assert "Master Plumber" in expand_job_title("plumers")
        assert "Attorney" in expand_job_title("attorny")
        assert expand_job_title("Growth Hacker") == ["Growth Hacker"]
