import os
from celery import Celery
from celery.schedules import crontab
from dotenv import load_dotenv

load_dotenv()

broker = os.getenv("REDIS_URL", "redis://localhost:6379/0")
backend = broker

celery = Celery("uptime_workers", broker=broker, backend=backend, include=["workers.tasks"])
celery.conf.task_routes = {
    "tasks.notify_monitor_status": {"queue": "notifications"},
    "tasks.notify_user_monitor_status": {"queue": "notifications"},
    "tasks.prune_notification_history": {"queue": "maintenance"},
}

celery.conf.beat_schedule = {
    "prune-notification-history-daily": {
        "task": "tasks.prune_notification_history",
        "schedule": crontab(hour=3, minute=15),  # Daily 3:15 AM
    },
}
