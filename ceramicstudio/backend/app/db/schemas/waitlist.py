from datetime import datetime
from pydantic import BaseModel, Field
from ..models.waitlist import WaitlistStatus


class WaitlistCreate(BaseModel):
    course_id: str
    customer_name: str = Field(min_length=1)
    customer_email: str
    participants: int = Field(default=1, ge=1)
    participant_names: str | None = None
    auto_book: bool = False


class WaitlistEntry(BaseModel):
    id: int
    course_id: str
    customer_name: str
    customer_email: str
    participants: int
    auto_book: bool
    status: WaitlistStatus
    converted_booking_id: int | None = None
    created_at: datetime | None = None
    notified_at: datetime | None = None
    converted_at: datetime | None = None

    class Config:
        from_attributes = True


class WaitlistProcessResult(BaseModel):
    processed: int
    entry_id: int | None = None
    action: str | None = None
    booking_id: int | None = None
    date: str | None = None
    start_time: str | None = None
