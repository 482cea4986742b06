"""
Search-related data models for the lead search pipeline
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Dict, Optional, Any

from .filters import FilterSet


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchOptions(CamelModel):
    """Caller options that shape a search and its cache key"""
    page: Optional[int] = None
    per_page: Optional[int] = None
    use_icp_scoring: Optional[bool] = None


class Candidate(CamelModel):
    """Raw person record returned by the people search provider"""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    seniority: Optional[str] = None
    company: Optional[str] = None
    company_website: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    employee_count: Optional[int] = None
    revenue: Optional[str] = None
    technologies: List[str] = []
    linkedin_url: Optional[str] = None
    photo_url: Optional[str] = None
    email_status: Optional[str] = None
    intent_topics: List[str] = []
    keywords: List[str] = []


class ScoredLead(Candidate):
    """Candidate with preference scoring attached"""
    icp_score: int = 50
    overall_score: int = 50
    match_reasons: List[str] = []
    unmatch_reasons: List[str] = []


class Pagination(CamelModel):
    page: int = 1
    per_page: int = 25
    total_pages: int = 0
    total_results: int = 0


class FetchResult(CamelModel):
    """Provider response mapped into candidates"""
    candidates: List[Candidate] = []
    pagination: Pagination = Pagination()
    filters_applied: int = 0
    domain_filtered: bool = False
    resolved_domains: List[str] = []


class FallbackInfo(CamelModel):
    """Explains which relaxation produced the returned results"""
    level: int
    description: str
    changes: List[str] = []
    filters: FilterSet


class GuidanceTip(CamelModel):
    type: str  # add_filter, refine or info
    message: str
    suggested_filter: Optional[str] = None


class SuggestedAddition(CamelModel):
    field: str
    values: List[str]
    source: str  # icp or history
    label: str


class AdaptiveGuidance(CamelModel):
    search_category: str = "vague"
    specificity_score: float = 0.0
    tips: List[GuidanceTip] = []
    suggested_additions: List[SuggestedAddition] = []
    has_recommendations: bool = False


class Suggestion(CamelModel):
    text: str
    filters: Dict[str, Any] = {}
    reasoning: str = ""


class SearchMetadata(CamelModel):
    duration_ms: int = 0
    filters_applied: int = 0
    icp_scoring_enabled: bool = False
    cached: bool = False
    search_attempts: int = 0


class SearchResponse(CamelModel):
    """Full pipeline output returned to callers and stored in the result cache"""
    session_id: Optional[int] = None
    query: str
    parsed_filters: FilterSet
    explanation: str = ""
    confidence: float = 0.0
    needs_clarification: bool = False
    clarifying_questions: List[str] = []
    leads: List[ScoredLead] = []
    pagination: Pagination = Pagination()
    suggestions: List[Suggestion] = []
    search_metadata: SearchMetadata = SearchMetadata()
    adaptive_guidance: AdaptiveGuidance = AdaptiveGuidance()
    fallback_used: Optional[FallbackInfo] = None
    can_undo: Optional[bool] = None
