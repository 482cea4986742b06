from sqlalchemy import Column, Integer, String, DateTime, JSON, Text, Float, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()

class SearchSession(Base):
    __tablename__ = "lead_search_sessions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)

    # Interpretation of the original query
    original_query = Column(Text, nullable=False)
    parsed_filters = Column(JSON, nullable=False, default=dict)
    parse_confidence = Column(Float, default=0.0)
    parse_explanation = Column(Text)

    # Append-only history; undo only moves the step pointer back
    refinement_history = Column(JSON, nullable=False, default=list)
    current_refinement_step = Column(Integer, nullable=False, default=0)

    results_count = Column(Integer)
    search_duration_ms = Column(Integer)
    status = Column(String(50), default="active")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class LeadFeedbackEvent(Base):
    __tablename__ = "lead_feedback_events"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False)
    event_type = Column(String(50), nullable=False)
    lead_attributes = Column(JSON, nullable=False, default=dict)
    lead_id = Column(String(255))
    contact_id = Column(Integer)
    session_id = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('idx_feedback_user_created', 'user_id', 'created_at'),
    )

class IcpProfileRecord(Base):
    __tablename__ = "icp_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, unique=True)

    # Lists of {"value", "weight", "count"}
    title_preferences = Column(JSON, default=list)
    industry_preferences = Column(JSON, default=list)
    company_size_preferences = Column(JSON, default=list)
    location_preferences = Column(JSON, default=list)
    seniority_preferences = Column(JSON, default=list)
    technology_preferences = Column(JSON, default=list)

    icp_confidence = Column(Float, default=0.0)
    total_data_points = Column(Integer, default=0)
    best_performing_attributes = Column(JSON, default=dict)
    last_calculated_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
