from datetime import time

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api import deps
from ...config import Settings, get_settings
from ...core.calendar_date import CalendarDate
from ...db import models, schemas
from ...db.session import get_db
from ...services import waitlist_service
from ...services.availability_service import format_time
from ...services.schedule_store import StoreReadError

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.get("", response_model=list[schemas.WaitlistEntry])
def list_waitlist(
    course_id: str | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(models.WaitlistEntry)
    if course_id:
        query = query.filter(models.WaitlistEntry.course_id == course_id)
    return query.order_by(models.WaitlistEntry.created_at, models.WaitlistEntry.id).all()


@router.post("", response_model=schemas.WaitlistEntry)
def join_waitlist(payload: schemas.WaitlistCreate, db: Session = Depends(get_db)):
    course = db.get(models.Course, payload.course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    try:
        return waitlist_service.join_waitlist(
            db,
            course,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            participants=payload.participants,
            participant_names=payload.participant_names,
            auto_book=payload.auto_book,
        )
    except waitlist_service.WaitlistError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{entry_id}", response_model=schemas.WaitlistEntry)
def leave_waitlist(entry_id: int, db: Session = Depends(get_db)):
    entry = db.get(models.WaitlistEntry, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Waitlist entry not found")
    try:
        return waitlist_service.leave_waitlist(db, entry)
    except waitlist_service.WaitlistError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/process/{course_id}", response_model=schemas.WaitlistProcessResult)
def process_waitlist(
    course: models.Course = Depends(deps.get_course),
    db: Session = Depends(get_db),
    today: CalendarDate = Depends(deps.get_today),
    now: time = Depends(deps.get_local_time),
    settings: Settings = Depends(get_settings),
):
    try:
        outcome = waitlist_service.process_waitlist(
            db, course, today, settings.waitlist_horizon_days, now
        )
    except StoreReadError as exc:
        raise deps.store_unavailable(exc) from exc
    if outcome is None:
        return schemas.WaitlistProcessResult(processed=0)
    return schemas.WaitlistProcessResult(
        processed=1,
        entry_id=outcome.entry.id,
        action=outcome.action.value,
        booking_id=outcome.booking.id if outcome.booking else None,
        date=outcome.slot.date.isoformat(),
        start_time=format_time(outcome.slot.capacity.window.start_time),
    )
