from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from ...core.calendar_date import CalendarDate
from ...db import models, schemas
from ...db.session import get_db
from ...services import schedule_service
from ...services.schedule_service import TimeRange

router = APIRouter(prefix="/overrides", tags=["overrides"])


def _get_override(db: Session, override_id: int) -> models.DateOverride:
    override = db.get(models.DateOverride, override_id)
    if not override:
        raise HTTPException(status_code=404, detail="Override not found")
    return override


@router.get("", response_model=list[schemas.DateOverride])
def list_overrides(
    course_id: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(models.DateOverride).options(selectinload(models.DateOverride.slots))
    if course_id:
        query = query.filter(models.DateOverride.course_id == course_id)
    if from_date:
        query = query.filter(models.DateOverride.override_date >= from_date)
    if to_date:
        query = query.filter(models.DateOverride.override_date <= to_date)
    return query.order_by(models.DateOverride.override_date, models.DateOverride.course_id).all()


@router.put("", response_model=schemas.DateOverride)
def upsert_override(payload: schemas.OverrideUpsert, db: Session = Depends(get_db)):
    try:
        return schedule_service.upsert_override(
            db,
            payload.course_id,
            CalendarDate.from_date(payload.override_date),
            is_available=payload.is_available,
            slots=[
                TimeRange(start_time=item.start_time, end_time=item.end_time)
                for item in payload.slots
            ],
        )
    except schedule_service.ScheduleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/{override_id}/apply", response_model=list[schemas.DateOverride])
def apply_override(
    override_id: int,
    payload: schemas.OverrideApply,
    db: Session = Depends(get_db),
):
    override = _get_override(db, override_id)
    try:
        return schedule_service.apply_override(db, override, payload.course_ids)
    except schedule_service.ScheduleError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{override_id}")
def delete_override(override_id: int, db: Session = Depends(get_db)):
    schedule_service.delete_override(db, _get_override(db, override_id))
    return {"status": "deleted"}
