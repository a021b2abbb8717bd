# backend/ldgrowth/services/scheduling/__init__.py
"""
Scheduling Services Module

Services behind automatic evaluation scheduling:

- eligibility_service: per-employee scheduling gate
- priority_service: batch ordering by urgency
- evaluation_date_service: anchor, next date, transition and spacing rules
- workload_service: per-evaluator daily cap
- evaluation_scheduler_service: store and all-stores runs
"""

from .eligibility_service import EligibilityService
from .evaluation_date_service import EvaluationDateService
from .evaluation_scheduler_service import EvaluationSchedulerService
from .priority_service import PriorityService
from .workload_service import WorkloadService

__all__ = [
    "EligibilityService",
    "EvaluationDateService",
    "EvaluationSchedulerService",
    "PriorityService",
    "WorkloadService",
]
