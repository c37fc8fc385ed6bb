from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from schemas.conversession import AppendTurnRequest, ConversationRecord, SessionSummary
from services import conversession_service
from utils.errors import PersistenceError, ValidationError
from utils.logger_factory import new_logger

router = APIRouter()


@router.post("/conversessions", response_model=ConversationRecord, status_code=status.HTTP_201_CREATED)
def append_conversation_turn(
    turn: AppendTurnRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    log = new_logger("append_conversation_turn")
    origin = turn.origin or request.headers.get("Origin")
    log.info(f"Appending turn to session {turn.session_id or conversession_service.ANONYMOUS_SESSION_ID}")

    try:
        return conversession_service.append_turn(db, turn.prompt, turn.response, turn.session_id, origin)
    except PersistenceError as e:
        log.error(f"Failed to save conversation turn: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save conversation")


@router.get("/conversessions", response_model=List[SessionSummary])
def list_conversation_sessions(
    limit: Optional[int] = Query(None, description="Maximum number of sessions to return"),
    db: Session = Depends(get_db),
):
    log = new_logger("list_conversation_sessions")
    try:
        sessions = conversession_service.list_sessions(db, limit=limit)
    except PersistenceError as e:
        log.error(f"Failed to list sessions: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list conversations")
    log.info(f"Returning {len(sessions)} sessions")
    return sessions


def _get_session(db: Session, session_id: Optional[str], sort: str, limit: Optional[int]):
    log = new_logger("get_session")
    try:
        turns = conversession_service.fetch_by_session(db, session_id, sort=sort, limit=limit)
    except ValidationError as e:
        log.warning(str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        log.error(f"Failed to fetch session {session_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch conversation")
    log.info(f"Returning {len(turns)} turns for session {session_id}")
    return turns


@router.get("/conversessions/session", response_model=List[ConversationRecord])
def get_session_by_query(
    session_id: Optional[str] = Query(None),
    sort: str = Query("asc", description="Timestamp order: asc or desc"),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return _get_session(db, session_id, sort, limit)


@router.get("/conversessions/{session_id}", response_model=List[ConversationRecord])
def get_session(
    session_id: str,
    sort: str = Query("asc", description="Timestamp order: asc or desc"),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return _get_session(db, session_id, sort, limit)
