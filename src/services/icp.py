from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, List, Optional, Any
from datetime import datetime
import logging

from ..cache.decorators import invalidate_search_cache_on_update
from ..database.models import IcpProfileRecord, LeadFeedbackEvent
from ..models.icp import (
    FEEDBACK_WEIGHTS, BestPerformingAttributes, FeedbackEventCreate, IcpProfile, PreferenceWeight
)
from ..search.config import SearchConfig

logger = logging.getLogger(__name__)

# Lead attribute -> profile column
PREFERENCE_FIELDS = {
    "title": "title_preferences",
    "industry": "industry_preferences",
    "company_size": "company_size_preferences",
    "location": "location_preferences",
    "seniority": "seniority_preferences",
    "technologies": "technology_preferences",
}

def _fold_preferences(events: List[LeadFeedbackEvent], attribute: str) -> List[PreferenceWeight]:
    """Average the feedback weight per attribute value, clamped to [-1, 1]"""
    totals: Dict[str, Dict[str, Any]] = {}
    for event in events:
        raw = (event.lead_attributes or {}).get(attribute)
        values = raw if isinstance(raw, list) else [raw]
        contribution = FEEDBACK_WEIGHTS.get(event.event_type, 0.0)
        for value in values:
            if not isinstance(value, str) or not value.strip():
                continue
            key = value.strip().lower()
            bucket = totals.setdefault(key, {"value": value.strip(), "sum": 0.0, "count": 0})
            bucket["sum"] += contribution
            bucket["count"] += 1

    preferences = [
        PreferenceWeight(
            value=bucket["value"],
            weight=round(max(-1.0, min(1.0, bucket["sum"] / bucket["count"])), 3),
            count=bucket["count"]
        )
        for bucket in totals.values()
    ]
    preferences.sort(key=lambda p: (p.weight, p.count), reverse=True)
    return preferences

def _top_values(preferences: List[PreferenceWeight], limit: int) -> List[str]:
    return [p.value for p in preferences if p.weight > 0][:limit]

class IcpProfileService:
    """Service for outcome feedback and the learned ideal customer profile"""

    def __init__(self, db: Session, search_cache=None):
        self.db = db
        self.search_cache = search_cache

    def record_feedback(self, user_id: int, event: FeedbackEventCreate) -> int:
        """Append a feedback event; the profile is only updated on recalculation"""
        try:
            db_event = LeadFeedbackEvent(
                user_id=user_id,
                event_type=event.event_type,
                lead_attributes=event.lead_attributes.model_dump(exclude_none=True),
                lead_id=event.lead_id,
                contact_id=event.contact_id,
                session_id=event.session_id
            )
            self.db.add(db_event)
            self.db.commit()
            self.db.refresh(db_event)
            logger.info(f"Recorded {event.event_type} feedback for user {user_id}")
            return db_event.id
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error recording feedback for user {user_id}: {e}")
            raise

    def get_profile(self, user_id: int) -> Optional[IcpProfile]:
        """Get the user's current profile without recomputing it"""
        record = self.db.query(IcpProfileRecord).filter(
            IcpProfileRecord.user_id == user_id
        ).first()

        if not record:
            return None

        return IcpProfile.model_validate(record)

    @invalidate_search_cache_on_update(user_id_arg="user_id")
    def recalculate_profile(self, user_id: int) -> IcpProfile:
        """
        Fold all feedback events into a fresh profile

        Cached search results for the user are invalidated afterwards,
        since their scores came from the previous profile.
        """
        events = self.db.query(LeadFeedbackEvent).filter(
            LeadFeedbackEvent.user_id == user_id
        ).order_by(LeadFeedbackEvent.created_at).all()

        preferences = {
            column: _fold_preferences(events, attribute)
            for attribute, column in PREFERENCE_FIELDS.items()
        }

        emailed = sum(1 for e in events if e.event_type == "emailed")
        replied = sum(1 for e in events if e.event_type == "replied")
        best = BestPerformingAttributes(
            top_titles=_top_values(preferences["title_preferences"], 5),
            top_industries=_top_values(preferences["industry_preferences"], 5),
            top_company_sizes=_top_values(preferences["company_size_preferences"], 3),
            top_locations=_top_values(preferences["location_preferences"], 5),
            average_reply_rate=round(min(1.0, replied / emailed), 3) if emailed else 0.0
        )

        data_points = len(events)
        confidence = min(1.0, data_points / SearchConfig.ICP_FULL_CONFIDENCE_DATA_POINTS)

        try:
            record = self.db.query(IcpProfileRecord).filter(
                IcpProfileRecord.user_id == user_id
            ).first()
            if not record:
                record = IcpProfileRecord(user_id=user_id)
                self.db.add(record)

            for column, values in preferences.items():
                setattr(record, column, [p.model_dump() for p in values])
            record.icp_confidence = round(confidence, 3)
            record.total_data_points = data_points
            record.best_performing_attributes = best.model_dump()
            record.last_calculated_at = datetime.utcnow()

            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving ICP profile for user {user_id}: {e}")
            raise

        logger.info(
            f"Recalculated ICP profile for user {user_id}: "
            f"{data_points} data points, confidence={confidence:.2f}"
        )
        return IcpProfile.model_validate(record)
