"""
Celery application for out-of-process escalation sweeps.

Used when ``ESCALATION_SCHEDULER_MODE`` is ``celery``; the beat schedule
replaces the in-process timer.
"""

from datetime import timedelta

from celery import Celery

from grievance_tracker.config.settings import settings

celery_app = Celery(
    "grievance_tracker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["grievance_tracker.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=settings.ESCALATION_SWEEP_TIMEOUT_SECONDS + 30,
    task_soft_time_limit=settings.ESCALATION_SWEEP_TIMEOUT_SECONDS,
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.ESCALATION_WORKERS,
    task_acks_late=True,
)

celery_app.conf.beat_schedule = {
    "escalation-sweep": {
        "task": "grievance_tracker.workers.tasks.run_escalation_sweep",
        "schedule": timedelta(seconds=settings.ESCALATION_SWEEP_INTERVAL_SECONDS),
        # A late sweep is superseded by the next one
        "options": {"expires": settings.ESCALATION_SWEEP_INTERVAL_SECONDS},
    },
}
