"""
Background services: periodic escalation sweep.
"""

from grievance_tracker.services.background.escalation_scheduler import (
    EscalationScheduler,
    run_sweep_once,
)

__all__ = ["EscalationScheduler", "run_sweep_once"]
