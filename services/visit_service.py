"""
Visitor counters keyed by normalized client address.

Every event either increments an existing row or creates a new one with a
one-time geolocation lookup. Both paths are single atomic statements
(UPDATE ... RETURNING, INSERT ... ON CONFLICT DO UPDATE ... RETURNING), so
concurrent requests for the same address never lose an increment or create
a duplicate row.
"""
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.visit import Visit
from schemas.visit import GeoLocation, VisitRecord
from services import geo_service
from utils.client_address import normalize_address
from utils.errors import PersistenceError
from utils.logger_factory import new_logger

log = new_logger("visit_service")

visits_table = Visit.__table__

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    insert = UPSERT_DIALECTS.get(dialect)
    if insert is None:
        raise PersistenceError(f"Upsert is not supported on the {dialect} dialect")
    return insert


def _increment_values(now: datetime, user_agent: Optional[str], origin: Optional[str]) -> dict:
    return {
        "visit_count": visits_table.c.visit_count + 1,
        "last_seen": now,
        "user_agent": user_agent,
        "origin": origin,
    }


def _increment_existing(db: Session, key: str, now: datetime, user_agent, origin) -> Optional[VisitRecord]:
    stmt = (
        update(visits_table)
        .where(visits_table.c.ip_address == key)
        .values(**_increment_values(now, user_agent, origin))
        .returning(*visits_table.c)
    )
    row = db.execute(stmt).mappings().first()
    db.commit()
    return VisitRecord.model_validate(dict(row)) if row else None


def _insert_or_increment(db: Session, key: str, geo: GeoLocation, now: datetime, user_agent, origin) -> VisitRecord:
    insert = _insert_for(db)
    stmt = insert(visits_table).values(
        ip_address=key,
        user_agent=user_agent,
        origin=origin,
        country=geo.country,
        city=geo.city,
        region=geo.region,
        isp=geo.isp,
        visit_count=1,
        first_seen=now,
        last_seen=now,
    )
    # A concurrent request may have created the row since the UPDATE; geo stays as the creator set it
    stmt = stmt.on_conflict_do_update(
        index_elements=[visits_table.c.ip_address],
        set_=_increment_values(now, user_agent, origin),
    ).returning(*visits_table.c)
    row = db.execute(stmt).mappings().one()
    db.commit()
    return VisitRecord.model_validate(dict(row))


def track_visit(
    db: Session,
    raw_address: str,
    user_agent: Optional[str],
    origin: Optional[str],
    now: Optional[datetime] = None,
    resolver: Optional[Callable[[str], GeoLocation]] = None,
) -> VisitRecord:
    """
    Record one visit event and return the resulting row.

    The geolocation lookup runs only when no row exists for the address, and
    runs with no transaction open so a slow provider never holds a lock.

    Raises:
        PersistenceError: the database rejected either statement.
    """
    key = normalize_address(raw_address)
    now = now or datetime.now(timezone.utc)

    try:
        record = _increment_existing(db, key, now, user_agent, origin)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Failed to increment visit for {key}: {str(e)}")
        raise PersistenceError("Failed to record visit") from e

    if record is not None:
        log.info(f"Visit #{record.visit_count} from {key}")
        return record

    resolve = resolver or geo_service.resolve
    geo = resolve(key)

    try:
        record = _insert_or_increment(db, key, geo, now, user_agent, origin)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Failed to insert visit for {key}: {str(e)}")
        raise PersistenceError("Failed to record visit") from e

    log.info(f"Visit #{record.visit_count} from {key} ({geo.country})")
    return record


def list_all(db: Session) -> List[VisitRecord]:
    """All visit rows in insertion order."""
    try:
        visits = db.query(Visit).order_by(Visit.id).all()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Failed to list visits: {str(e)}")
        raise PersistenceError("Failed to list visits") from e
    return [VisitRecord.model_validate(visit) for visit in visits]
