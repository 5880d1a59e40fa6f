import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api.routes import courses, schedule, overrides, bookings, waitlist
from .db.session import Base, engine
from .config import get_settings
from .workers.scheduler import get_scheduler

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(title="CeramicStudio Booking API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(courses.router, prefix="/api/v1")
app.include_router(schedule.router, prefix="/api/v1")
app.include_router(overrides.router, prefix="/api/v1")
app.include_router(bookings.router, prefix="/api/v1")
app.include_router(waitlist.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event() -> None:
    Base.metadata.create_all(bind=engine)
    if settings.scheduler_enabled:
        scheduler = get_scheduler()
        scheduler.start()
        app.state.scheduler = scheduler


@app.on_event("shutdown")
async def shutdown_event() -> None:
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)
