from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...api import deps
from ...config import Settings, get_settings
from ...core.calendar_date import CalendarDate
from ...db import models, schemas
from ...db.session import get_db
from ...services import calendar_service, schedule_service
from ...services.availability_service import format_time
from ...services.capacity_service import effective_capacity
from ...services.events import EventSink
from ...services.schedule_store import SqlScheduleStore, StoreFactory, StoreReadError

router = APIRouter(prefix="/courses", tags=["courses"])


def _course_response(course: models.Course) -> schemas.Course:
    payload = schemas.Course.model_validate(course)
    payload.effective_capacity = effective_capacity(course)
    return payload


@router.get("", response_model=list[schemas.Course])
def list_courses(active_only: bool = True, db: Session = Depends(get_db)):
    query = db.query(models.Course)
    if active_only:
        query = query.filter(models.Course.is_active.is_(True))
    return [_course_response(course) for course in query.order_by(models.Course.id).all()]


@router.post("", response_model=schemas.Course)
def create_course(payload: schemas.CourseCreate, db: Session = Depends(get_db)):
    try:
        course = schedule_service.create_course(
            db,
            course_id=payload.id,
            title=payload.title,
            description=payload.description,
            capacity=payload.capacity,
            schedule_rule=payload.schedule_rule,
            capacity_class=payload.capacity_class,
        )
    except schedule_service.ScheduleError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _course_response(course)


@router.get("/{course_id}", response_model=schemas.Course)
def get_course(course: models.Course = Depends(deps.get_course)):
    return _course_response(course)


@router.patch("/{course_id}", response_model=schemas.Course)
def update_course(
    payload: schemas.CourseUpdate,
    course: models.Course = Depends(deps.get_course),
    db: Session = Depends(get_db),
):
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(course, key, value)
    db.commit()
    db.refresh(course)
    return _course_response(course)


@router.get("/{course_id}/availability", response_model=list[schemas.AvailableSlot])
def course_availability(
    booking_day: date = Query(..., alias="date"),
    course: models.Course = Depends(deps.get_course),
    db: Session = Depends(get_db),
    events: EventSink = Depends(deps.get_event_sink),
):
    day = CalendarDate.from_date(booking_day)
    try:
        lines = calendar_service.slot_options(course, day, SqlScheduleStore(db), events)
    except StoreReadError as exc:
        raise deps.store_unavailable(exc) from exc
    return [
        schemas.AvailableSlot(
            slot_id=line.window.id,
            date=day.isoformat(),
            start_time=format_time(line.window.start_time),
            end_time=format_time(line.window.end_time),
            source=line.window.source.value,
            duration_minutes=line.window.duration_minutes,
            formatted_time=line.window.formatted_time,
            total_capacity=line.total_capacity,
            booked_seats=line.booked_seats,
            remaining_seats=line.remaining_seats,
            fully_booked=line.fully_booked,
            overbooked=line.overbooked,
        )
        for line in lines
    ]


@router.get("/{course_id}/calendar", response_model=schemas.CalendarMonth)
def course_calendar(
    month: str = Query(..., pattern=r"^\d{4}-\d{2}$"),
    course: models.Course = Depends(deps.get_course),
    store_factory: StoreFactory = Depends(deps.get_store_factory),
    today: CalendarDate = Depends(deps.get_today),
    settings: Settings = Depends(get_settings),
    events: EventSink = Depends(deps.get_event_sink),
):
    anchor = deps.parse_calendar_date(f"{month}-01")
    try:
        summary = calendar_service.month_summary(
            course,
            anchor,
            store_factory,
            max_workers=settings.calendar_max_workers,
            events=events,
        )
    except StoreReadError as exc:
        raise deps.store_unavailable(exc) from exc
    days = {}
    for day in anchor.month_days():
        key = day.isoformat()
        entry = summary[key]
        days[key] = schemas.CalendarDay(
            has_slots=entry.has_slots,
            remaining_total=entry.remaining_total,
            state=calendar_service.day_state(summary, day, today).value,
        )
    return schemas.CalendarMonth(course_id=course.id, month=month, days=days)
