from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import Any, Dict
import logging

from ..auth.utils import get_current_user_id
from ..database.connection import get_db
from ..models.icp import FeedbackEventCreate, IcpProfile
from ..search.guidance import generate_profile_suggestions
from ..services.icp import IcpProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/icp", tags=["icp"])

def get_icp_service(request: Request, db: Session = Depends(get_db)) -> IcpProfileService:
    return IcpProfileService(db, search_cache=request.app.state.search_cache)

@router.post("/feedback", status_code=status.HTTP_201_CREATED)
async def record_feedback(
    event: FeedbackEventCreate,
    current_user_id: int = Depends(get_current_user_id),
    service: IcpProfileService = Depends(get_icp_service)
) -> Dict[str, Any]:
    """Record an outreach outcome for a lead"""
    try:
        event_id = service.record_feedback(current_user_id, event)
        return {"id": event_id, "event_type": event.event_type}
    except Exception as e:
        logger.error(f"Error recording feedback for user {current_user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record feedback"
        )

@router.post("/recalculate", response_model=IcpProfile)
async def recalculate_profile(
    current_user_id: int = Depends(get_current_user_id),
    service: IcpProfileService = Depends(get_icp_service)
):
    """Recalculate the learned profile from recorded feedback"""
    try:
        return service.recalculate_profile(current_user_id)
    except Exception as e:
        logger.error(f"Error recalculating ICP profile for user {current_user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to recalculate profile"
        )

@router.get("/profile")
async def get_profile(
    current_user_id: int = Depends(get_current_user_id),
    service: IcpProfileService = Depends(get_icp_service)
) -> Dict[str, Any]:
    """Current learned profile and the searches it suggests"""
    profile = service.get_profile(current_user_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No ICP profile yet; record feedback and recalculate first"
        )

    return {
        "profile": profile.model_dump(mode="json"),
        "suggestions": [s.model_dump() for s in generate_profile_suggestions(profile)]
    }
