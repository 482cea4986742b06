"""
Search Engine Core for the lead search API
Runs interpretation, fetching, broadening, deduplication and scoring as one pipeline
"""

import logging
import time
from typing import Optional

from .broadening import FallbackBroadener
from .config import SearchConfig
from .dedupe import dedupe_candidates
from .filters import FilterSet, describe_filters
from .guidance import build_guidance, build_suggestions
from .interpreter import ParsedQuery, QueryInterpreter
from .models import (
    AdaptiveGuidance, FallbackInfo, FetchResult, Pagination, SearchMetadata, SearchOptions, SearchResponse
)
from .provider import ResultFetcher
from .ranking import IcpScorer
from .specificity import SpecificityResult, adjust_per_page, analyze_specificity, estimate_result_count
from ..cache.config import CacheConfig
from ..models.icp import IcpProfile
from ..services.icp import IcpProfileService
from ..services.sessions import SearchSessionService

logger = logging.getLogger(__name__)


def calculate_post_search_confidence(confidence: float, lead_count: int, result: FetchResult) -> float:
    """Adjust interpretation confidence by what the search actually returned"""
    if lead_count == 0:
        adjusted = confidence * 0.7
    elif lead_count >= SearchConfig.GOOD_ENOUGH_RESULTS:
        adjusted = confidence + 0.1
    else:
        adjusted = confidence
    if result.domain_filtered and result.resolved_domains:
        adjusted += 0.05
    return round(max(0.0, min(1.0, adjusted)), 3)


class LeadSearchEngine:
    """Natural-language lead search with fallback broadening and preference scoring"""

    def __init__(
        self,
        interpreter: QueryInterpreter,
        fetcher: ResultFetcher,
        sessions: SearchSessionService,
        profiles: IcpProfileService,
        cache,
        broadener: Optional[FallbackBroadener] = None,
        scorer: Optional[IcpScorer] = None,
    ):
        self.interpreter = interpreter
        self.fetcher = fetcher
        self.sessions = sessions
        self.profiles = profiles
        self.cache = cache
        self.broadener = broadener or FallbackBroadener()
        self.scorer = scorer or IcpScorer()

    async def search(self, user_id: int, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        """
        Run a free-text lead search

        Args:
            user_id: Requesting user
            query: Free-text query
            options: Pagination and scoring options

        Returns:
            SearchResponse, from the result cache when an equivalent query is fresh

        Raises:
            ProviderError: when the people search provider fails
        """
        options = options or SearchOptions()
        start_time = time.time()

        cached = self.cache.get(user_id, query, options)
        if cached is not None:
            cached.search_metadata.cached = True
            cached.search_metadata.duration_ms = int((time.time() - start_time) * 1000)
            logger.info(f"Search cache HIT for user {user_id}: '{query}'")
            return cached

        parsed = await self.interpreter.interpret(query)
        logger.info(f"Parsed '{query}' with {parsed.confidence * 100:.0f}% confidence")

        use_icp = options.use_icp_scoring is not False
        session_id = self.sessions.create(user_id, query, parsed.filters, parsed.confidence, parsed.explanation)
        profile = self.profiles.get_profile(user_id) if use_icp else None

        if parsed.needs_clarification:
            logger.info(f"Query needs clarification: {parsed.clarifying_questions}")
            return self._clarification_response(session_id, query, parsed, start_time)

        response = await self._execute(
            user_id=user_id,
            session_id=session_id,
            query=query,
            filters=parsed.filters,
            explanation=parsed.explanation,
            confidence=parsed.confidence,
            specificity=SpecificityResult(
                score=parsed.specificity_score,
                category=parsed.search_category,
                missing_signals=parsed.missing_signals,
                filter_count=parsed.filters.active_filter_count(),
            ),
            options=options,
            profile=profile,
            start_time=start_time,
        )
        response.clarifying_questions = parsed.clarifying_questions

        ttl = None
        if response.confidence < SearchConfig.LOW_CONFIDENCE:
            ttl = CacheConfig.get_ttl_for_key_type("low_confidence")
        self.cache.set(user_id, query, options, response, ttl=ttl)
        return response

    async def refine(
        self,
        user_id: int,
        session_id: int,
        command: str,
        options: Optional[SearchOptions] = None,
    ) -> SearchResponse:
        """
        Apply a refinement command to a session and search with the merged filters

        Raises:
            SessionNotFoundError: unknown or foreign session
            ProviderError: when the people search provider fails
        """
        options = options or SearchOptions()
        start_time = time.time()

        refinement = await self.sessions.refine(session_id, user_id, command, self.interpreter)
        profile = self.profiles.get_profile(user_id) if options.use_icp_scoring is not False else None

        response = await self._execute(
            user_id=user_id,
            session_id=session_id,
            query=command,
            filters=refinement.filters,
            explanation=f"Refined search: {describe_filters(refinement.filters)}",
            confidence=refinement.parsed.confidence,
            specificity=analyze_specificity(refinement.filters),
            options=options,
            profile=profile,
            start_time=start_time,
        )
        response.can_undo = refinement.can_undo
        return response

    async def undo(
        self,
        user_id: int,
        session_id: int,
        options: Optional[SearchOptions] = None,
    ) -> Optional[SearchResponse]:
        """
        Step a session back one refinement and search with the restored filters

        Returns:
            SearchResponse, or None when there is nothing to undo

        Raises:
            SessionNotFoundError: unknown or foreign session
        """
        options = options or SearchOptions()
        start_time = time.time()

        result = self.sessions.undo(session_id, user_id)
        if not result.success:
            logger.info(f"Nothing to undo on session {session_id}")
            return None

        db_session = self.sessions.get(session_id, user_id)
        profile = self.profiles.get_profile(user_id) if options.use_icp_scoring is not False else None

        response = await self._execute(
            user_id=user_id,
            session_id=session_id,
            query=db_session.original_query,
            filters=result.filters,
            explanation=f"Reverted to step {result.step}: {describe_filters(result.filters)}",
            confidence=db_session.parse_confidence or SearchConfig.DEFAULT_CONFIDENCE,
            specificity=analyze_specificity(result.filters),
            options=options,
            profile=profile,
            start_time=start_time,
        )
        response.can_undo = result.can_undo
        return response

    async def _execute(
        self,
        user_id: int,
        session_id: int,
        query: str,
        filters: FilterSet,
        explanation: str,
        confidence: float,
        specificity: SpecificityResult,
        options: SearchOptions,
        profile: Optional[IcpProfile],
        start_time: float,
    ) -> SearchResponse:
        estimate = estimate_result_count(filters)
        per_page = adjust_per_page(options.per_page or SearchConfig.DEFAULT_PER_PAGE, estimate)
        page = options.page or SearchConfig.DEFAULT_PAGE
        logger.info(f"Estimated result count: {estimate}, requesting {per_page} per page")

        async def fetch(candidate_filters: FilterSet) -> FetchResult:
            return await self.fetcher.fetch(candidate_filters, page, per_page, user_id)

        guidance = build_guidance(
            filters,
            specificity.category,
            specificity.score,
            specificity.missing_signals,
            profile,
        )
        initial = await fetch(filters)

        outcome = await self.broadener.broaden(filters, initial, fetch)
        unique = dedupe_candidates(outcome.result.candidates)

        icp_enabled = self.scorer.is_enabled(profile)
        leads = self.scorer.score(profile, unique, outcome.filters)
        total_results = outcome.result.pagination.total_results
        suggestions = build_suggestions(filters, len(leads), total_results, profile, icp_enabled)

        duration_ms = int((time.time() - start_time) * 1000)
        self.sessions.record_results(session_id, total_results, duration_ms)

        fallback_used = None
        if outcome.step is not None:
            fallback_used = FallbackInfo(
                level=outcome.step.level,
                description=outcome.step.description,
                changes=outcome.step.changes,
                filters=outcome.step.filters,
            )

        logger.info(
            f"Search completed in {duration_ms}ms: {len(leads)} leads, "
            f"{len(suggestions)} suggestions, {outcome.attempts} provider queries"
        )
        return SearchResponse(
            session_id=session_id,
            query=query,
            parsed_filters=filters,
            explanation=explanation,
            confidence=calculate_post_search_confidence(confidence, len(leads), outcome.result),
            needs_clarification=False,
            leads=leads,
            pagination=outcome.result.pagination,
            suggestions=suggestions,
            search_metadata=SearchMetadata(
                duration_ms=duration_ms,
                filters_applied=outcome.result.filters_applied,
                icp_scoring_enabled=icp_enabled,
                cached=False,
                search_attempts=outcome.attempts,
            ),
            adaptive_guidance=guidance,
            fallback_used=fallback_used,
        )

    def _clarification_response(
        self,
        session_id: int,
        query: str,
        parsed: ParsedQuery,
        start_time: float,
    ) -> SearchResponse:
        return SearchResponse(
            session_id=session_id,
            query=query,
            parsed_filters=parsed.filters,
            explanation=parsed.explanation,
            confidence=parsed.confidence,
            needs_clarification=True,
            clarifying_questions=parsed.clarifying_questions,
            leads=[],
            pagination=Pagination(page=1, per_page=SearchConfig.DEFAULT_PER_PAGE, total_pages=0, total_results=0),
            suggestions=[],
            search_metadata=SearchMetadata(
                duration_ms=int((time.time() - start_time) * 1000),
                filters_applied=0,
                icp_scoring_enabled=False,
            ),
            adaptive_guidance=AdaptiveGuidance(
                search_category=parsed.search_category,
                specificity_score=parsed.specificity_score,
            ),
        )

    def cache_stats(self) -> dict:
        return self.cache.stats()
