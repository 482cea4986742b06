from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime

from ..search.filters import normalize_company_size

# Contribution of each outcome to an attribute's preference weight
FEEDBACK_WEIGHTS = {
    "thumbs_up": 0.3,
    "thumbs_down": -0.5,
    "imported": 0.5,
    "emailed": 0.6,
    "opened": 0.8,
    "replied": 1.0,
    "converted": 1.5,
    "unsubscribed": -1.0,
}

class LeadAttributes(BaseModel):
    """Snapshot of the lead a feedback event refers to"""
    title: Optional[str] = None
    seniority: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    location: Optional[str] = None
    technologies: List[str] = []
    revenue: Optional[str] = None

    @field_validator('company_size')
    @classmethod
    def validate_company_size(cls, v):
        if v is None or not v.strip():
            return None
        bucket = normalize_company_size(v)
        if bucket is None:
            raise ValueError(f'Unknown company size: {v}')
        return bucket

class FeedbackEventCreate(BaseModel):
    """Model for recording an outreach outcome"""
    event_type: str
    lead_attributes: LeadAttributes = LeadAttributes()
    lead_id: Optional[str] = None
    contact_id: Optional[int] = None
    session_id: Optional[int] = None

    @field_validator('event_type')
    @classmethod
    def validate_event_type(cls, v):
        if v not in FEEDBACK_WEIGHTS:
            raise ValueError(f'Unknown feedback type: {v}')
        return v

class PreferenceWeight(BaseModel):
    value: str
    weight: float
    count: int = 0

class BestPerformingAttributes(BaseModel):
    top_titles: List[str] = []
    top_industries: List[str] = []
    top_company_sizes: List[str] = []
    top_locations: List[str] = []
    average_reply_rate: float = 0.0

class IcpProfile(BaseModel):
    """Learned ideal customer profile"""
    user_id: int
    title_preferences: List[PreferenceWeight] = []
    industry_preferences: List[PreferenceWeight] = []
    company_size_preferences: List[PreferenceWeight] = []
    location_preferences: List[PreferenceWeight] = []
    seniority_preferences: List[PreferenceWeight] = []
    technology_preferences: List[PreferenceWeight] = []
    icp_confidence: float = 0.0
    total_data_points: int = 0
    best_performing_attributes: BestPerformingAttributes = BestPerformingAttributes()
    last_calculated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ProfileSuggestion(BaseModel):
    description: str
    filters: dict
    reasoning: str
