from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
import logging

from ..auth.utils import get_current_user_id
from ..database.connection import get_db
from ..models.search import RefineRequest, SearchOptionsRequest, SearchRequest
from ..search.engine import LeadSearchEngine
from ..search.exceptions import ProviderError, SessionNotFoundError
from ..search.models import SearchResponse
from ..services.icp import IcpProfileService
from ..services.sessions import SearchSessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search/ai", tags=["search"])

def get_search_engine(request: Request, db: Session = Depends(get_db)) -> LeadSearchEngine:
    """Build a per-request engine around the process-wide caches and clients"""
    state = request.app.state
    return LeadSearchEngine(
        interpreter=state.interpreter,
        fetcher=state.fetcher,
        sessions=SearchSessionService(db),
        profiles=IcpProfileService(db, search_cache=state.search_cache),
        cache=state.search_cache
    )

def _provider_unavailable(e: ProviderError) -> HTTPException:
    logger.error(f"Lead provider error: {e}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Lead provider is temporarily unavailable, please retry"
    )

@router.post("", response_model=SearchResponse)
async def ai_search(
    search_request: SearchRequest,
    current_user_id: int = Depends(get_current_user_id),
    engine: LeadSearchEngine = Depends(get_search_engine)
):
    """Search leads with a free-text query"""
    try:
        return await engine.search(current_user_id, search_request.query, search_request.to_options())
    except ProviderError as e:
        raise _provider_unavailable(e)
    except Exception as e:
        logger.error(f"AI search error for user {current_user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Search failed"
        )

@router.post("/refine", response_model=SearchResponse)
async def refine_search(
    refine_request: RefineRequest,
    current_user_id: int = Depends(get_current_user_id),
    engine: LeadSearchEngine = Depends(get_search_engine)
):
    """Refine an existing search session with a follow-up command"""
    try:
        return await engine.refine(
            current_user_id,
            refine_request.session_id,
            refine_request.command,
            refine_request.to_options()
        )
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ProviderError as e:
        raise _provider_unavailable(e)
    except Exception as e:
        logger.error(f"Refinement error for session {refine_request.session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Refinement failed"
        )

@router.post("/{session_id}/undo", response_model=SearchResponse)
async def undo_refinement(
    session_id: int,
    options: Optional[SearchOptionsRequest] = None,
    current_user_id: int = Depends(get_current_user_id),
    engine: LeadSearchEngine = Depends(get_search_engine)
):
    """Undo the last refinement of a search session"""
    options = options or SearchOptionsRequest()
    try:
        response = await engine.undo(current_user_id, session_id, options.to_options())
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ProviderError as e:
        raise _provider_unavailable(e)
    except Exception as e:
        logger.error(f"Undo error for session {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Undo failed"
        )

    if response is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Nothing to undo"
        )
    return response

@router.get("/cache/stats")
async def get_cache_stats(
    request: Request,
    current_user_id: int = Depends(get_current_user_id)
) -> Dict[str, Any]:
    """Result and provider cache statistics"""
    state = request.app.state
    return {
        "search_cache": state.search_cache.stats(),
        "provider_cache": state.provider_cache.stats()
    }
