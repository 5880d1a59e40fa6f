from enum import Enum as PyEnum
from sqlalchemy import Boolean, CheckConstraint, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..session import Base


class ScheduleRule(str, PyEnum):
    standard = "standard"
    first_sunday_of_month = "first_sunday_of_month"


class CapacityClass(str, PyEnum):
    standard = "standard"
    pottery_wheel = "pottery_wheel"


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_course_capacity_positive"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    capacity: Mapped[int | None] = mapped_column(Integer)
    schedule_rule: Mapped[ScheduleRule] = mapped_column(
        Enum(ScheduleRule), default=ScheduleRule.standard, nullable=False
    )
    capacity_class: Mapped[CapacityClass] = mapped_column(
        Enum(CapacityClass), default=CapacityClass.standard, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    recurring_slots = relationship("RecurringSlot", back_populates="course")
    special_slots = relationship("SpecialRecurringSlot", back_populates="course")
    overrides = relationship("DateOverride", back_populates="course")
