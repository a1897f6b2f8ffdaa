"""
Celery tasks.
"""

from typing import Any, Dict

from celery.exceptions import SoftTimeLimitExceeded

from grievance_tracker.core.logging import configure_logging, get_logger
from grievance_tracker.services.background import run_sweep_once
from grievance_tracker.workers.celery_app import celery_app

logger = get_logger(__name__)


@celery_app.task(name="grievance_tracker.workers.tasks.run_escalation_sweep", ignore_result=False)
def run_escalation_sweep() -> Dict[str, Any]:
    """
    Escalate overdue complaints.

    Returns:
        The sweep report as a dict; ``{"error": ...}`` if the sweep failed
    """
    configure_logging()
    try:
        result = run_sweep_once()
    except SoftTimeLimitExceeded:
        logger.error("Escalation sweep exceeded its time limit")
        raise

    if not result.is_success:
        logger.error(f"Escalation sweep failed: {result.error.message}")
        return {"error": result.error.to_dict()}

    return result.data.to_dict()
