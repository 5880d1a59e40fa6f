from datetime import date, time
from pydantic import BaseModel, Field, field_validator, model_validator


class TimeRange(BaseModel):
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class WeeklyScheduleUpdate(BaseModel):
    days: dict[int, list[TimeRange]] = Field(default_factory=dict)


class RecurringSlotCreate(TimeRange):
    course_id: str | None = None
    day_of_week: int = Field(ge=0, le=6)


class RecurringSlotUpdate(BaseModel):
    start_time: time | None = None
    end_time: time | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    is_active: bool | None = None

    @field_validator("start_time", "end_time", "day_of_week", "is_active")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field may be omitted but not set to null")
        return value


class RecurringSlot(BaseModel):
    id: str
    course_id: str | None = None
    day_of_week: int
    start_time: str
    end_time: str
    is_active: bool

    class Config:
        from_attributes = True


class SpecialScheduleUpdate(BaseModel):
    slots: list[TimeRange] = Field(default_factory=list)


class SpecialSlot(BaseModel):
    id: str
    course_id: str
    start_time: str
    end_time: str
    is_active: bool

    class Config:
        from_attributes = True


class OverrideUpsert(BaseModel):
    course_id: str
    override_date: date
    is_available: bool
    slots: list[TimeRange] = Field(default_factory=list)


class OverrideApply(BaseModel):
    course_ids: list[str]


class OverrideSlot(BaseModel):
    id: str
    start_time: str
    end_time: str
    is_active: bool

    class Config:
        from_attributes = True


class DateOverride(BaseModel):
    id: int
    course_id: str
    override_date: date
    is_available: bool
    slots: list[OverrideSlot] = Field(default_factory=list)

    class Config:
        from_attributes = True
