"""
Chat conversation log grouped into sessions.

Turns are written once and never changed. Sessions are not stored; a session
is simply every turn sharing a session_id.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.conversession import Conversession
from models.visit import UNKNOWN
from schemas.conversession import ConversationRecord, SessionSummary
from utils.errors import PersistenceError, ValidationError
from utils.logger_factory import new_logger

log = new_logger("conversession_service")

ANONYMOUS_SESSION_ID = "session-anonymous"
SORT_ORDERS = ("asc", "desc")


def derive_user_id(origin: Optional[str]) -> str:
    """Leftmost hostname label of an origin URL, e.g. https://guddu.example.com -> guddu."""
    if not origin:
        return UNKNOWN
    try:
        parts = urlsplit(origin.strip())
        host = parts.hostname
    except ValueError:
        log.warning(f"Invalid URL: {origin}")
        return UNKNOWN
    if not parts.scheme or not host:
        log.warning(f"Invalid URL: {origin}")
        return UNKNOWN
    return host.split(".")[0] or UNKNOWN


def _positive_limit(limit) -> Optional[int]:
    if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0:
        return limit
    return None


def append_turn(
    db: Session,
    prompt: str,
    response: Optional[str],
    session_id: Optional[str],
    origin: Optional[str],
    now: Optional[datetime] = None,
) -> ConversationRecord:
    """Store one prompt/response pair. A missing session_id goes to the anonymous session."""
    turn = Conversession(
        user_id=derive_user_id(origin),
        session_id=session_id or ANONYMOUS_SESSION_ID,
        prompt=prompt,
        response=response,
        timestamp=now or datetime.now(timezone.utc),
    )
    try:
        db.add(turn)
        db.commit()
        db.refresh(turn)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Failed to save conversation turn: {str(e)}")
        raise PersistenceError("Failed to save conversation turn") from e

    log.info(f"Saved turn {turn.id} in session {turn.session_id} for user {turn.user_id}")
    return ConversationRecord.model_validate(turn)


def fetch_by_session(
    db: Session,
    session_id: Optional[str],
    sort: str = "asc",
    limit: Optional[int] = None,
) -> List[ConversationRecord]:
    """
    Turns of one session ordered by timestamp.

    Raises:
        ValidationError: session_id is missing or sort is not "asc"/"desc".
        PersistenceError: the query failed.
    """
    if not session_id:
        raise ValidationError("Missing required field: session_id")
    if sort not in SORT_ORDERS:
        raise ValidationError(f"Invalid sort order: {sort}")

    if sort == "asc":
        ordering = (Conversession.timestamp.asc(), Conversession.id.asc())
    else:
        ordering = (Conversession.timestamp.desc(), Conversession.id.desc())

    query = db.query(Conversession).filter(Conversession.session_id == session_id).order_by(*ordering)
    limit = _positive_limit(limit)
    if limit is not None:
        query = query.limit(limit)

    try:
        turns = query.all()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Failed to fetch session {session_id}: {str(e)}")
        raise PersistenceError("Failed to fetch conversation") from e
    return [ConversationRecord.model_validate(turn) for turn in turns]


def group_sessions(records: Iterable[ConversationRecord], limit: Optional[int] = None) -> List[SessionSummary]:
    """
    One summary per session_id, most recently active first.

    user_id comes from the first turn seen for the session; sessions with the
    same last_message_at keep their first-seen order.
    """
    summaries = {}
    for record in records:
        summary = summaries.get(record.session_id)
        if summary is None:
            summaries[record.session_id] = SessionSummary(
                session_id=record.session_id,
                user_id=record.user_id,
                last_message_at=record.timestamp,
            )
        elif record.timestamp > summary.last_message_at:
            summary.last_message_at = record.timestamp

    ordered = sorted(summaries.values(), key=lambda s: s.last_message_at, reverse=True)
    limit = _positive_limit(limit)
    return ordered[:limit] if limit is not None else ordered


def list_sessions(db: Session, limit: Optional[int] = None) -> List[SessionSummary]:
    try:
        turns = db.query(Conversession).order_by(Conversession.id).all()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Failed to list sessions: {str(e)}")
        raise PersistenceError("Failed to list conversation sessions") from e
    return group_sessions((ConversationRecord.model_validate(turn) for turn in turns), limit=limit)
