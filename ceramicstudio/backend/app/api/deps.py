from datetime import time
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker
from ..config import Settings, get_settings
from ..core.calendar_date import CalendarDate
from ..db import models
from ..db.session import get_db, get_session_factory
from ..services.events import EventSink, default_sink
from ..services.schedule_store import StoreFactory, StoreReadError, sql_store_factory

STORE_RETRY_AFTER_SECONDS = 5


def get_course(
    course_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> models.Course:
    course = db.get(models.Course, course_id)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


def get_today(settings: Annotated[Settings, Depends(get_settings)]) -> CalendarDate:
    return CalendarDate.today(settings.timezone)


def get_local_time(settings: Annotated[Settings, Depends(get_settings)]) -> time:
    return CalendarDate.local_time(settings.timezone)


def get_store_factory(
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)],
) -> StoreFactory:
    return sql_store_factory(session_factory)


def get_event_sink() -> EventSink:
    return default_sink()


def parse_calendar_date(value: str) -> CalendarDate:
    try:
        return CalendarDate.parse(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc


def store_unavailable(exc: StoreReadError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Failed to load availability, please retry",
        headers={"Retry-After": str(STORE_RETRY_AFTER_SECONDS)},
    )
