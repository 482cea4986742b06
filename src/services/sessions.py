from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from dataclasses import dataclass
from typing import Optional
from datetime import datetime, timezone
import logging

from ..database.models import SearchSession
from ..search.exceptions import SessionNotFoundError
from ..search.filters import FilterSet, merge_filters
from ..search.interpreter import ParsedQuery, QueryInterpreter

logger = logging.getLogger(__name__)

@dataclass
class RefinementResult:
    session_id: int
    command: str
    filters: FilterSet
    parsed: ParsedQuery
    step: int

    @property
    def can_undo(self) -> bool:
        return self.step > 0

@dataclass
class UndoResult:
    success: bool
    filters: FilterSet
    step: int

    @property
    def can_undo(self) -> bool:
        return self.step > 0

class SearchSessionService:
    """Service for search sessions and their refinement history"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        query: str,
        filters: FilterSet,
        confidence: float,
        explanation: str
    ) -> int:
        """Persist a new search session and return its id"""
        try:
            db_session = SearchSession(
                user_id=user_id,
                original_query=query,
                parsed_filters=filters.model_dump(),
                parse_confidence=confidence,
                parse_explanation=explanation,
                refinement_history=[],
                current_refinement_step=0,
                status="active"
            )
            self.db.add(db_session)
            self.db.commit()
            self.db.refresh(db_session)
            return db_session.id
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating search session for user {user_id}: {e}")
            raise

    def get(self, session_id: int, user_id: int) -> SearchSession:
        """Load a session owned by the user"""
        db_session = self.db.query(SearchSession).filter(
            SearchSession.id == session_id,
            SearchSession.user_id == user_id
        ).first()

        if not db_session:
            raise SessionNotFoundError(session_id)

        return db_session

    def current_filters(self, db_session: SearchSession) -> FilterSet:
        """Filters at the session's current refinement step"""
        step = db_session.current_refinement_step or 0
        if step == 0:
            return FilterSet.model_validate(db_session.parsed_filters or {})
        entry = (db_session.refinement_history or [])[step - 1]
        return FilterSet.model_validate(entry["filters_after"])

    async def refine(
        self,
        session_id: int,
        user_id: int,
        command: str,
        interpreter: QueryInterpreter
    ) -> RefinementResult:
        """
        Interpret a refinement command and union it into the session's filters

        The entry is appended to the full history, undone entries included,
        and the step pointer moves to it.

        Raises:
            SessionNotFoundError: unknown session or owned by another user
        """
        db_session = self.get(session_id, user_id)
        filters_before = self.current_filters(db_session)

        parsed = await interpreter.interpret(command)
        filters_after = merge_filters(filters_before, parsed.filters)

        history = list(db_session.refinement_history or [])
        history.append({
            "command": command,
            "applied_at": datetime.now(timezone.utc).isoformat(),
            "filters_before": filters_before.model_dump(),
            "filters_after": filters_after.model_dump(),
            "confidence": parsed.confidence,
            "explanation": parsed.explanation
        })

        try:
            db_session.refinement_history = history
            db_session.current_refinement_step = len(history)
            self.db.commit()
            self.db.refresh(db_session)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error refining search session {session_id}: {e}")
            raise

        logger.info(f"Refined session {session_id} to step {db_session.current_refinement_step}: '{command}'")
        return RefinementResult(
            session_id=session_id,
            command=command,
            filters=filters_after,
            parsed=parsed,
            step=db_session.current_refinement_step
        )

    def undo(self, session_id: int, user_id: int) -> UndoResult:
        """
        Move the refinement pointer back one step

        At step 0 nothing changes and success is False. Otherwise the
        returned filters are the original ones (step 0) or the
        filters_after of the entry at the new step.
        """
        db_session = self.get(session_id, user_id)
        step = db_session.current_refinement_step or 0

        if step == 0:
            return UndoResult(success=False, filters=self.current_filters(db_session), step=0)

        try:
            db_session.current_refinement_step = step - 1
            self.db.commit()
            self.db.refresh(db_session)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error undoing refinement on session {session_id}: {e}")
            raise

        logger.info(f"Undo on session {session_id}: step {step} -> {step - 1}")
        return UndoResult(
            success=True,
            filters=self.current_filters(db_session),
            step=db_session.current_refinement_step
        )

    def record_results(self, session_id: int, results_count: int, duration_ms: int) -> None:
        """Store result totals for a session; failures are logged, not raised"""
        try:
            db_session = self.db.query(SearchSession).filter(SearchSession.id == session_id).first()
            if not db_session:
                return
            db_session.results_count = results_count
            db_session.search_duration_ms = duration_ms
            db_session.updated_at = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error recording results for session {session_id}: {e}")
