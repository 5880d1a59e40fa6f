from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WaitlistNotification:
    entry_id: int
    customer_name: str
    customer_email: str
    course_id: str
    course_title: str
    date: str
    start_time: str
    end_time: str
    available_places: int


def build_waitlist_message(notification: WaitlistNotification) -> str:
    return (
        f"Hallo {notification.customer_name}, für «{notification.course_title}» ist am "
        f"{notification.date} von {notification.start_time} bis {notification.end_time} "
        f"ein Platz frei geworden ({notification.available_places} verfügbar)."
    )


def notify_waitlist_entry(notification: WaitlistNotification) -> bool:
    settings = get_settings()
    url = settings.notification_webhook_url
    if not url:
        logger.warning(
            "Notification webhook is not configured; skipping waitlist notification",
            extra={"entry_id": notification.entry_id},
        )
        return False

    with httpx.Client(timeout=10) as client:
        try:
            response = client.post(
                url,
                json={
                    "type": "waitlist_slot_available",
                    "waitlist_entry_id": notification.entry_id,
                    "customer_name": notification.customer_name,
                    "customer_email": notification.customer_email,
                    "course_id": notification.course_id,
                    "course_title": notification.course_title,
                    "available_slot": {
                        "date": notification.date,
                        "start_time": notification.start_time,
                        "end_time": notification.end_time,
                        "available_places": notification.available_places,
                    },
                    "message": build_waitlist_message(notification),
                },
            )
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception(
                "Failed to send waitlist notification",
                extra={"entry_id": notification.entry_id},
            )
            return False
    return True
