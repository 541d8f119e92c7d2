import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("booking_engine")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Unpaid pending bookings give their dates back - every minute
    "release-unpaid-bookings": {
        "task": "bookings.release_unpaid_bookings",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Confirmed bookings past check-out - every hour
    "complete-elapsed-bookings": {
        "task": "bookings.complete_elapsed_bookings",
        "schedule": crontab(minute=15),
    },
}
