from pydantic import BaseModel, Field, field_validator
from ..models.course import CapacityClass, ScheduleRule


class CourseBase(BaseModel):
    title: str
    description: str | None = None
    capacity: int | None = Field(default=None, gt=0)


class CourseCreate(CourseBase):
    id: str = Field(min_length=1, max_length=128)
    schedule_rule: ScheduleRule | None = None
    capacity_class: CapacityClass | None = None


class CourseUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    capacity: int | None = Field(default=None, gt=0)
    schedule_rule: ScheduleRule | None = None
    capacity_class: CapacityClass | None = None
    is_active: bool | None = None

    @field_validator("title", "schedule_rule", "capacity_class", "is_active")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field may be omitted but not set to null")
        return value


class Course(CourseBase):
    id: str
    schedule_rule: ScheduleRule
    capacity_class: CapacityClass
    is_active: bool
    effective_capacity: int | None = None

    class Config:
        from_attributes = True
