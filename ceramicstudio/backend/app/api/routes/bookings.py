import logging
from datetime import date, time

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...api import deps
from ...config import Settings, get_settings
from ...core.calendar_date import CalendarDate
from ...db import models, schemas
from ...db.session import get_db
from ...services import booking_service, waitlist_service
from ...services.events import EventSink
from ...services.schedule_store import StoreReadError

router = APIRouter(prefix="/bookings", tags=["bookings"])
logger = logging.getLogger(__name__)

ADMIN_ACTOR = "admin"


def _get_booking(db: Session, booking_id: int) -> models.Booking:
    booking = db.get(models.Booking, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.get("", response_model=list[schemas.Booking])
def list_bookings(
    course_id: str | None = None,
    slot_id: str | None = None,
    booking_date: date | None = None,
    status_filter: models.BookingStatus | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(models.Booking)
    if course_id:
        query = query.filter(models.Booking.course_id == course_id)
    if slot_id:
        query = query.filter(models.Booking.slot_reference_id == slot_id)
    if booking_date:
        query = query.filter(models.Booking.booking_date == booking_date)
    if status_filter:
        query = query.filter(models.Booking.status == status_filter)
    return query.order_by(
        models.Booking.booking_date, models.Booking.start_time, models.Booking.id
    ).all()


@router.post("", response_model=schemas.BookingCreated)
def create_booking(
    payload: schemas.BookingCreate,
    db: Session = Depends(get_db),
    today: CalendarDate = Depends(deps.get_today),
    events: EventSink = Depends(deps.get_event_sink),
):
    course = db.get(models.Course, payload.course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    try:
        result = booking_service.create_booking(
            db,
            course,
            slot_id=payload.slot_id,
            booking_date=CalendarDate.from_date(payload.booking_date),
            today=today,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            participants=payload.participants,
            notes=payload.notes,
            status=payload.status,
            events=events,
        )
    except booking_service.BookingError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except StoreReadError as exc:
        raise deps.store_unavailable(exc) from exc
    return schemas.BookingCreated(
        booking=schemas.Booking.model_validate(result.booking),
        remaining_seats=result.capacity.remaining_seats,
        total_capacity=result.capacity.total_capacity,
    )


@router.post("/{booking_id}/cancel", response_model=schemas.Booking)
def cancel_booking(
    booking_id: int,
    payload: schemas.BookingCancel,
    db: Session = Depends(get_db),
    today: CalendarDate = Depends(deps.get_today),
    now: time = Depends(deps.get_local_time),
    settings: Settings = Depends(get_settings),
):
    booking = _get_booking(db, booking_id)
    try:
        booking = booking_service.cancel_booking(db, booking, actor=ADMIN_ACTOR)
    except booking_service.BookingError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    logger.info(
        "Booking cancelled",
        extra={"booking_id": booking.id, "reason": payload.reason},
    )

    # freed seats go to the next waitlist entry
    try:
        waitlist_service.process_waitlist(
            db, booking.course, today, settings.waitlist_horizon_days, now
        )
    except StoreReadError:
        logger.exception(
            "Waitlist processing after cancellation failed",
            extra={"booking_id": booking.id},
        )
    return booking


@router.patch("/{booking_id}/status", response_model=schemas.Booking)
def update_booking_status(
    booking_id: int,
    payload: schemas.BookingStatusUpdate,
    db: Session = Depends(get_db),
):
    booking = _get_booking(db, booking_id)
    try:
        return booking_service.update_status(db, booking, payload.status, actor=ADMIN_ACTOR)
    except booking_service.BookingError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc


@router.post("/{booking_id}/participants", response_model=schemas.Booking)
def add_participant(
    booking_id: int,
    payload: schemas.ParticipantAdd,
    db: Session = Depends(get_db),
):
    booking = _get_booking(db, booking_id)
    try:
        return booking_service.add_participant(db, booking, payload.participant_name)
    except booking_service.BookingError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc


@router.get("/stats")
def booking_stats(
    db: Session = Depends(get_db),
    today: CalendarDate = Depends(deps.get_today),
):
    active = [models.BookingStatus.pending, models.BookingStatus.confirmed]
    total = db.query(models.Booking).count()
    confirmed = (
        db.query(models.Booking)
        .filter(models.Booking.status == models.BookingStatus.confirmed)
        .count()
    )
    bookings_today = (
        db.query(models.Booking)
        .filter(models.Booking.status.in_(active))
        .filter(models.Booking.booking_date == today.to_date())
        .count()
    )
    upcoming_participants = (
        db.query(func.coalesce(func.sum(models.Booking.participants), 0))
        .filter(models.Booking.status.in_(active))
        .filter(models.Booking.booking_date >= today.to_date())
        .scalar()
    )
    return {
        "total": total,
        "confirmed": confirmed,
        "bookings_today": bookings_today,
        "upcoming_participants": int(upcoming_participants or 0),
    }
