import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("lodging")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


app.conf.beat_schedule = {
    # expired discounts are switched off shortly after midnight
    "deactivate-expired-discounts": {
        "task": "promotions.deactivate_expired_discounts",
        "schedule": crontab(minute=5, hour=0),
    },
}
