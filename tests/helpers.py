"""
Test doubles shared across test modules
"""
import copy
from unittest.mock import AsyncMock

from src.search.extractor import QueryExtractor
from src.search.filters import FilterSet
from src.search.models import Candidate, FetchResult, Pagination, SearchResponse

class FakeExtractor(QueryExtractor):
    """Returns canned extraction payloads keyed by query text"""

    def __init__(self, responses=None, default=None, error=None):
        self.responses = responses or {}
        self.default = default if default is not None else {
            "classification": {"specificity": "low"},
            "filters": {},
            "confidence": 0.2,
            "explanation": "Nothing recognizable"
        }
        self.error = error
        self.calls = []

    async def extract(self, query):
        self.calls.append(query)
        if self.error:
            raise self.error
        return copy.deepcopy(self.responses.get(query, self.default))

def extraction(filters, confidence=0.9, specificity="high", explanation="Parsed"):
    """Extraction payload in the shape the extractor returns"""
    return {
        "classification": {"specificity": specificity},
        "filters": filters,
        "confidence": confidence,
        "explanation": explanation
    }

def make_candidate(id, **fields):
    """Candidate with sensible defaults"""
    data = {
        "id": str(id),
        "first_name": "Test",
        "last_name": f"Lead{id}",
        "name": f"Test Lead{id}",
    }
    data.update(fields)
    return Candidate(**data)

def make_fetch_result(count, total=None, page=1, per_page=25, filters_applied=1):
    """FetchResult with `count` distinct candidates"""
    candidates = [make_candidate(i, email=f"lead{i}@example.com") for i in range(count)]
    return FetchResult(
        candidates=candidates,
        pagination=Pagination(
            page=page,
            per_page=per_page,
            total_pages=1 if count else 0,
            total_results=total if total is not None else count
        ),
        filters_applied=filters_applied
    )

def make_response(query="vp of sales in austin", leads=None):
    return SearchResponse(
        session_id=1,
        query=query,
        parsed_filters=FilterSet(job_titles=["VP of Sales"], locations=["Austin"]),
        explanation="VP of Sales in Austin",
        confidence=0.9,
        leads=leads or []
    )

class FakeFetcher:
    """ResultFetcher stand-in; `results_for` maps a FilterSet to a FetchResult"""

    def __init__(self, results_for):
        self.results_for = results_for
        self.fetch = AsyncMock(side_effect=self._fetch)
        self.requested = []

    async def _fetch(self, filters, page=1, per_page=25, user_id=None):
        self.requested.append(filters)
        return self.results_for(filters)
