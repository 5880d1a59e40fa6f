from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api import deps
from ...db import models, schemas
from ...db.session import get_db
from ...services import schedule_service
from ...services.availability_service import format_time, parse_time
from ...services.schedule_service import TimeRange

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _ranges(items: list[schemas.TimeRange]) -> list[TimeRange]:
    return [TimeRange(start_time=item.start_time, end_time=item.end_time) for item in items]


@router.get("/recurring", response_model=list[schemas.RecurringSlot])
def list_recurring_slots(
    course_id: str | None = None,
    include_global: bool = True,
    db: Session = Depends(get_db),
):
    query = db.query(models.RecurringSlot)
    if course_id:
        condition = models.RecurringSlot.course_id == course_id
        if include_global:
            condition = condition | models.RecurringSlot.course_id.is_(None)
        query = query.filter(condition)
    elif not include_global:
        query = query.filter(models.RecurringSlot.course_id.is_not(None))
    return query.order_by(
        models.RecurringSlot.day_of_week, models.RecurringSlot.start_time
    ).all()


@router.post("/recurring", response_model=schemas.RecurringSlot)
def create_recurring_slot(payload: schemas.RecurringSlotCreate, db: Session = Depends(get_db)):
    if payload.course_id and db.get(models.Course, payload.course_id) is None:
        raise HTTPException(status_code=404, detail="Course not found")
    slot = models.RecurringSlot(
        course_id=payload.course_id,
        day_of_week=payload.day_of_week,
        start_time=format_time(payload.start_time),
        end_time=format_time(payload.end_time),
        is_active=True,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot


@router.put("/recurring/global", response_model=list[schemas.RecurringSlot])
def replace_global_schedule(
    payload: schemas.WeeklyScheduleUpdate, db: Session = Depends(get_db)
):
    days = {day: _ranges(items) for day, items in payload.days.items()}
    try:
        return schedule_service.replace_weekly_schedule(db, None, days)
    except schedule_service.ScheduleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.put("/recurring/{course_id}", response_model=list[schemas.RecurringSlot])
def replace_course_schedule(
    payload: schemas.WeeklyScheduleUpdate,
    course: models.Course = Depends(deps.get_course),
    db: Session = Depends(get_db),
):
    days = {day: _ranges(items) for day, items in payload.days.items()}
    try:
        return schedule_service.replace_weekly_schedule(db, course.id, days)
    except schedule_service.ScheduleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.patch("/recurring/slots/{slot_id}", response_model=schemas.RecurringSlot)
def update_recurring_slot(
    slot_id: str,
    payload: schemas.RecurringSlotUpdate,
    db: Session = Depends(get_db),
):
    slot = db.get(models.RecurringSlot, slot_id)
    if not slot:
        raise HTTPException(status_code=404, detail="Slot not found")
    updates = payload.model_dump(exclude_unset=True)
    for key in ("start_time", "end_time"):
        if updates.get(key) is not None:
            updates[key] = format_time(updates[key])
    start = updates.get("start_time", slot.start_time)
    end = updates.get("end_time", slot.end_time)
    try:
        ordered = parse_time(start) < parse_time(end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not ordered:
        raise HTTPException(status_code=400, detail="start_time must be before end_time")
    for key, value in updates.items():
        setattr(slot, key, value)
    db.commit()
    db.refresh(slot)
    return slot


@router.delete("/recurring/slots/{slot_id}")
def delete_recurring_slot(slot_id: str, db: Session = Depends(get_db)):
    slot = db.get(models.RecurringSlot, slot_id)
    if not slot:
        raise HTTPException(status_code=404, detail="Slot not found")
    db.delete(slot)
    db.commit()
    return {"status": "deleted"}


@router.get("/special/{course_id}", response_model=list[schemas.SpecialSlot])
def list_special_slots(
    course: models.Course = Depends(deps.get_course),
    db: Session = Depends(get_db),
):
    return (
        db.query(models.SpecialRecurringSlot)
        .filter(models.SpecialRecurringSlot.course_id == course.id)
        .order_by(models.SpecialRecurringSlot.start_time)
        .all()
    )


@router.put("/special/{course_id}", response_model=list[schemas.SpecialSlot])
def replace_special_slots(
    payload: schemas.SpecialScheduleUpdate,
    course: models.Course = Depends(deps.get_course),
    db: Session = Depends(get_db),
):
    try:
        return schedule_service.replace_special_slots(db, course, _ranges(payload.slots))
    except schedule_service.ScheduleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
