"""
Celery worker entry points.

    celery -A grievance_tracker.workers.celery_app worker --beat
"""
