"""
Search module for the lead search API
Provides query interpretation, filter expansion and result ranking
"""

from .filters import FilterSet, merge_filters
from .models import SearchOptions, Candidate, ScoredLead, SearchResponse
from .exceptions import SearchError, ExtractionError, ProviderError, SessionNotFoundError

__all__ = [
    "FilterSet",
    "merge_filters",
    "SearchOptions",
    "Candidate",
    "ScoredLead",
    "SearchResponse",
    "SearchError",
    "ExtractionError",
    "ProviderError",
    "SessionNotFoundError"
]
