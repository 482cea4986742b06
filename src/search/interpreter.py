"""
Query Interpreter for lead search
Turns free text into a validated FilterSet with confidence and specificity
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .config import SearchConfig
from .expansion import (
    expand_company_group,
    expand_company_size,
    expand_job_title,
    expand_seniority,
    map_industry,
    preprocess_query,
)
from .extractor import QueryExtractor
from .filters import (
    COMPANY_SIZES,
    EMAIL_STATUSES,
    INDUSTRIES,
    REVENUE_RANGES,
    SENIORITY_LEVELS,
    FilterSet,
    union_values,
)
from .guidance import build_clarifying_questions
from .specificity import analyze_specificity, is_minimum_viable_search

logger = logging.getLogger(__name__)

# Bare role words that usually need a follow-up question
AMBIGUOUS_ROLES = {
    "developer": "Do you mean software developers or real estate developers?",
    "developers": "Do you mean software developers or real estate developers?",
    "agent": "What kind of agent: real estate, insurance or sales?",
    "agents": "What kind of agent: real estate, insurance or sales?",
    "broker": "What kind of broker: mortgage, insurance or real estate?",
    "brokers": "What kind of broker: mortgage, insurance or real estate?",
    "consultant": "What area do the consultants work in?",
    "consultants": "What area do the consultants work in?",
    "investor": "Are you looking for angel, venture or real estate investors?",
    "investors": "Are you looking for angel, venture or real estate investors?",
    "manager": "What type of manager are you looking for?",
    "managers": "What type of manager are you looking for?",
}

_CANONICAL_SENIORITIES = {level.lower(): level for level in SENIORITY_LEVELS}
_CANONICAL_INDUSTRIES = {industry.lower(): industry for industry in INDUSTRIES}
_COMPANY_SIZE_SET = set(COMPANY_SIZES)
_REVENUE_RANGE_SET = set(REVENUE_RANGES)
_EMAIL_STATUS_SET = set(EMAIL_STATUSES)


@dataclass
class ParsedQuery:
    """Outcome of interpreting a free-text query"""
    filters: FilterSet
    confidence: float
    explanation: str
    clarifying_questions: List[str] = field(default_factory=list)
    needs_clarification: bool = False
    query_type: str = "broad"  # specific, broad or ambiguous
    expanded_from_original: bool = False
    specificity_score: float = 0.0
    missing_signals: List[str] = field(default_factory=list)
    search_category: str = "vague"


def failed_parse(explanation: str = "Failed to parse query") -> ParsedQuery:
    """Low-confidence result used whenever extraction cannot be trusted"""
    missing = ["job_title", "location"]
    return ParsedQuery(
        filters=FilterSet(),
        confidence=SearchConfig.FAILED_PARSE_CONFIDENCE,
        explanation=explanation,
        clarifying_questions=build_clarifying_questions(missing),
        needs_clarification=True,
        query_type="ambiguous",
        expanded_from_original=False,
        specificity_score=0.0,
        missing_signals=missing,
        search_category="vague",
    )


def _clean_strings(raw: Any) -> List[str]:
    """Keep non-blank strings from a raw list; anything else yields []"""
    if not isinstance(raw, list):
        return []
    return union_values([], [value.strip() for value in raw if isinstance(value, str) and value.strip()])


def _parse_confidence(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return SearchConfig.DEFAULT_CONFIDENCE
    if value <= 0:
        return SearchConfig.DEFAULT_CONFIDENCE
    return min(value, 1.0)


class QueryInterpreter:
    """Validates and expands raw extractions into FilterSets"""

    def __init__(self, extractor: QueryExtractor):
        self.extractor = extractor

    async def interpret(self, query: str) -> ParsedQuery:
        """
        Interpret a free-text query

        Never raises: extraction failures degrade to a low-confidence,
        clarification-requesting result.
        """
        if not query or not query.strip():
            return failed_parse("Empty query")

        start_time = time.time()
        cleaned, corrections = preprocess_query(query)
        if corrections:
            logger.debug(f"Corrected query terms: {', '.join(corrections)}")
        try:
            payload = await self.extractor.extract(cleaned)
            result = self._build_result(payload)
        except Exception as e:
            logger.error(f"Query interpretation failed for '{query}': {e}")
            return failed_parse()

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Interpreted query in {elapsed_ms}ms: {len(result.filters.job_titles)} titles, "
            f"{len(result.filters.locations)} locations, confidence={result.confidence:.2f}"
        )
        return result

    def _build_result(self, payload: Dict[str, Any]) -> ParsedQuery:
        if not isinstance(payload, dict):
            raise ValueError("Extraction payload must be an object")

        classification = payload.get("classification") or {}
        raw_filters = payload.get("filters") or {}
        if not isinstance(classification, dict) or not isinstance(raw_filters, dict):
            raise ValueError("Extraction payload has an invalid shape")

        filters, expanded = self.validate_filters(raw_filters)
        specificity = analyze_specificity(filters)
        confidence = _parse_confidence(payload.get("confidence"))
        explanation = payload.get("explanation") if isinstance(payload.get("explanation"), str) else ""
        tier = classification.get("specificity") or "medium"

        minimum_viable = is_minimum_viable_search(filters, specificity.score)
        needs_clarification = not minimum_viable and (
            tier == "low"
            or (confidence < SearchConfig.LOW_CONFIDENCE and specificity.filter_count < 2)
        )

        questions = _clean_strings(classification.get("suggestedClarifications"))
        questions.extend(self._ambiguity_questions(raw_filters.get("jobTitles")))
        if needs_clarification and not questions:
            questions = build_clarifying_questions(specificity.missing_signals)

        if tier == "high":
            query_type = "specific"
        elif tier == "medium":
            query_type = "broad"
        else:
            query_type = "ambiguous"

        return ParsedQuery(
            filters=filters,
            confidence=confidence,
            explanation=explanation,
            clarifying_questions=union_values([], questions),
            needs_clarification=needs_clarification,
            query_type=query_type,
            expanded_from_original=expanded or len(filters.job_titles) > 1 or bool(filters.seniorities),
            specificity_score=specificity.score,
            missing_signals=specificity.missing_signals,
            search_category=specificity.category,
        )

    def validate_filters(self, raw: Dict[str, Any]):
        """
        Validate raw extracted filters against the canonical option lists

        Returns:
            Tuple of (FilterSet, whether any expansion rule fired)
        """
        expanded = False

        job_titles: List[str] = []
        for title in _clean_strings(raw.get("jobTitles")):
            variants = expand_job_title(title)
            expanded = expanded or len(variants) > 1
            job_titles = union_values(job_titles, variants)

        industries: List[str] = []
        for industry in _clean_strings(raw.get("industries")):
            mapped = [value for value in map_industry(industry) if value.lower() in _CANONICAL_INDUSTRIES]
            industries = union_values(industries, mapped)

        company_sizes: List[str] = []
        for size in _clean_strings(raw.get("companySizes")):
            if size in _COMPANY_SIZE_SET:
                company_sizes = union_values(company_sizes, [size])
            else:
                buckets = expand_company_size(size)
                expanded = expanded or bool(buckets)
                company_sizes = union_values(company_sizes, buckets)

        seniorities: List[str] = []
        for seniority in _clean_strings(raw.get("seniorities")):
            canonical = _CANONICAL_SENIORITIES.get(seniority.lower())
            if canonical:
                seniorities = union_values(seniorities, [canonical])
            else:
                tiers = expand_seniority(seniority)
                expanded = expanded or bool(tiers)
                seniorities = union_values(seniorities, tiers)
        seniorities.sort(key=SENIORITY_LEVELS.index)

        companies: List[str] = []
        for company in _clean_strings(raw.get("companies")):
            members = expand_company_group(company)
            expanded = expanded or len(members) > 1
            companies = union_values(companies, members)

        filters = FilterSet(
            job_titles=job_titles,
            locations=_clean_strings(raw.get("locations")),
            industries=industries,
            company_sizes=[size for size in company_sizes if size in _COMPANY_SIZE_SET],
            companies=companies,
            seniorities=seniorities,
            technologies=_clean_strings(raw.get("technologies")),
            keywords=_clean_strings(raw.get("keywords")),
            revenue_ranges=[value for value in _clean_strings(raw.get("revenueRanges")) if value in _REVENUE_RANGE_SET],
            intent_topics=_clean_strings(raw.get("intentTopics")),
            email_statuses=[value.lower() for value in _clean_strings(raw.get("emailStatuses")) if value.lower() in _EMAIL_STATUS_SET],
            management_levels=_clean_strings(raw.get("managementLevels")),
            previous_companies=_clean_strings(raw.get("previousCompanies")),
            schools=_clean_strings(raw.get("schools")),
            recent_job_change=raw.get("recentJobChange") is True,
        )
        return filters, expanded

    def _ambiguity_questions(self, raw_titles: Any) -> List[str]:
        questions = []
        for title in _clean_strings(raw_titles):
            question = AMBIGUOUS_ROLES.get(title.lower())
            if question:
                questions.append(question)
        return questions
