from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Optional

from database import get_db
from schemas.visit import TrackVisitRequest, TrackVisitResponse, VisitReport
from services import visit_service
from services.visit_report import build_visit_report
from utils.client_address import client_address, normalize_address
from utils.errors import PersistenceError
from utils.jwt_auth import require_roles
from utils.logger_factory import new_logger

router = APIRouter()


@router.post("/visits/track", response_model=TrackVisitResponse)
def track_visit(
    request: Request,
    visit_data: Optional[TrackVisitRequest] = None,
    db: Session = Depends(get_db),
):
    """
    Count a visit from the calling client.

    Values in the body win over request headers; a body is optional.
    """
    log = new_logger("track_visit")
    visit_data = visit_data or TrackVisitRequest()

    if visit_data.real_client_ip:
        address = normalize_address(visit_data.real_client_ip)
        log.info(f"Using real client IP from request body: {address}")
    else:
        address = client_address(request)

    user_agent = visit_data.user_agent or request.headers.get("User-Agent", "")
    origin = visit_data.origin or request.headers.get("Origin")

    try:
        record = visit_service.track_visit(db, address, user_agent, origin)
    except PersistenceError as e:
        log.error(f"Failed to record visit: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to record visit")

    return TrackVisitResponse(
        address=record.ip_address,
        visit_count=record.visit_count,
        origin=record.origin,
        geo=record.geo,
    )


@router.get("/visits/report", response_model=VisitReport)
def visit_report(
    db: Session = Depends(get_db),
    current_user=Depends(require_roles("ADMIN")),
):
    """Country/region/city rollup of known-location visitors."""
    log = new_logger("visit_report")
    log.info(f"Building visit report for {current_user.get('user_id')}")

    try:
        records = visit_service.list_all(db)
    except PersistenceError as e:
        log.error(f"Failed to load visits: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get visit report")

    report = build_visit_report(records)
    log.info(f"Report covers {len(report.visits)} of {len(records)} visitors in {len(report.countries)} countries")
    return report
