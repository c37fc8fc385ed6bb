from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from database import get_db
from models.application import Application
from schemas.application import ApplicationCreate
from services.mail_service import format_application_mail, send_notification_email
from utils.logger_factory import new_logger

router = APIRouter()


@router.post("/application", status_code=status.HTTP_204_NO_CONTENT)
def submit_application(
    payload: ApplicationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Store a job application and notify by e-mail once the response is sent."""
    log = new_logger("submit_application")

    missing = payload.missing_fields()
    if missing:
        log.warning(f"Application missing fields: {missing}")
        raise HTTPException(status_code=400, detail="All required fields must be provided")

    application = Application(
        description=payload.description,
        email=payload.email,
        hr_name=payload.hr_name,
        organization=payload.organization,
        phone=payload.phone,
        role=payload.role,
        salary=payload.salary or "",
    )
    try:
        db.add(application)
        db.commit()
        db.refresh(application)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Error submitting application: {str(e)}")
        raise HTTPException(status_code=500, detail="Error submitting application")

    log.info(f"Application {application.id} submitted for {application.role} at {application.organization}")
    background_tasks.add_task(send_notification_email, format_application_mail(application))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
