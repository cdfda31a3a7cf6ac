# backend/owner_admin/workers/celery_app.py
from __future__ import annotations

from celery import Celery

from ..config import settings

celery_app = Celery(
    "owner_admin",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["owner_admin.workers.otp_tasks"],
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
    timezone="UTC",
)

celery_app.conf.task_routes = {
    "owner_admin.workers.otp_tasks.*": {"queue": "maintenance"},
}

celery_app.conf.beat_schedule = {
    "sweep-expired-otps": {
        "task": "owner_admin.workers.otp_tasks.sweep_expired_otps",
        "schedule": float(settings.otp_sweep_interval_seconds),
    },
}
