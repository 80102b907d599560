from celery import Celery

from app.core.config import Config, get_redis_url


def make_celery(app_name: str = "church_events") -> Celery:
    redis_url = get_redis_url()
    celery = Celery(app_name, broker=redis_url, backend=redis_url, include=["app.tasks"])
    celery.conf.task_serializer = "json"
    celery.conf.result_serializer = "json"
    celery.conf.accept_content = ["json"]
    celery.conf.result_persistent = False
    celery.conf.task_track_started = True
    celery.conf.beat_schedule = {
        "reconcile-occupancy": {
            "task": "app.tasks.reconcile_occupancy_task",
            "schedule": float(Config.OCCUPANCY_RECONCILE_INTERVAL),
        },
    }
    return celery


celery_app = make_celery()
