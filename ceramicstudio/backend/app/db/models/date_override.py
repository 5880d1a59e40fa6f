from datetime import date
from uuid import uuid4
from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..session import Base


class DateOverride(Base):
    __tablename__ = "date_overrides"
    __table_args__ = (
        UniqueConstraint("course_id", "override_date", name="uq_date_override_course_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"))
    override_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    is_available: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    course = relationship("Course", back_populates="overrides")
    slots = relationship(
        "OverrideSlot",
        back_populates="override",
        cascade="all, delete-orphan",
        order_by="OverrideSlot.start_time",
    )


class OverrideSlot(Base):
    __tablename__ = "date_override_time_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    override_id: Mapped[int] = mapped_column(
        ForeignKey("date_overrides.id", ondelete="CASCADE"), index=True
    )
    start_time: Mapped[str] = mapped_column(String(8), nullable=False)
    end_time: Mapped[str] = mapped_column(String(8), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    override = relationship("DateOverride", back_populates="slots")
