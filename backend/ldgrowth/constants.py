# backend/ldgrowth/constants.py
"""
Global Constants for LD Growth

Centralized location for all scheduling constants to avoid hardcoded values
throughout the codebase.
"""

from .enums import CycleStart, EvaluationStatus, Position, TransitionMode

# =============================================================================
# EVALUATION SPACING
# =============================================================================

MIN_DAYS_BETWEEN = 30
MAX_DAYS_BETWEEN = 365
GRACE_PERIOD_DAYS = 14

# First evaluations land between now + GRACE_PERIOD_DAYS and now + this
FIRST_EVALUATION_MAX_DAYS = 90

# Hard ceiling (days from now) for transition-mode pushes
TRANSITION_CEILING_DAYS = 90
ALIGN_MAX_ITERATIONS = 12

# Fiscal year starts 1 October
FISCAL_YEAR_START_MONTH = 10

# =============================================================================
# ELIGIBILITY
# =============================================================================

DEFAULT_MIN_EMPLOYMENT_DAYS = 90
ROLE_CHANGE_WAIT_DAYS = 30
TRANSFER_WAIT_DAYS = 45

# Returned-from-leave window that earns a priority bonus
RECENT_RETURN_MIN_DAYS = GRACE_PERIOD_DAYS
RECENT_RETURN_MAX_DAYS = 30

# =============================================================================
# PRIORITY WEIGHTS
# =============================================================================

PRIORITY_OVERDUE = 100
PRIORITY_NEAR_CEILING = 75  # within 30 days of MAX_DAYS_BETWEEN
PRIORITY_APPROACHING_CEILING = 50  # within 60 days of MAX_DAYS_BETWEEN
PRIORITY_PER_MISSED = 25
PRIORITY_FIRST_EVALUATION = 40
PRIORITY_RECENT_RETURN = 30
PRIORITY_TRANSFER = 60
PRIORITY_ROLE_CHANGE = 45
PRIORITY_OVERRUN_CAP = 30

# =============================================================================
# WORKLOAD
# =============================================================================

MAX_EVALUATIONS_PER_DAY = 3
WORKLOAD_WINDOW_DAYS = 7

# =============================================================================
# REMINDERS
# =============================================================================

REMINDER_WINDOW_DAYS = 7

# =============================================================================
# STATUS GROUPS
# =============================================================================

RESOLVED_EVALUATION_STATUSES = {
    EvaluationStatus.COMPLETED.value,
    EvaluationStatus.MISSED.value,
}
UNRESOLVED_EVALUATION_STATUSES = [
    EvaluationStatus.PENDING_SELF_EVALUATION.value,
    EvaluationStatus.PENDING_MANAGER_REVIEW.value,
    EvaluationStatus.IN_REVIEW_SESSION.value,
]

MANAGER_POSITIONS = [Position.LEADER.value, Position.DIRECTOR.value]

# =============================================================================
# SETTINGS DEFAULTS
# =============================================================================

DEFAULT_AUTO_SCHEDULE = False
DEFAULT_FREQUENCY_DAYS = 90
DEFAULT_CYCLE_START = CycleStart.HIRE_DATE
DEFAULT_TRANSITION_MODE = TransitionMode.COMPLETE_CYCLE

DEFAULT_SCHEDULING_SETTINGS = {
    "auto_schedule": DEFAULT_AUTO_SCHEDULE,
    "frequency": DEFAULT_FREQUENCY_DAYS,
    "cycle_start": DEFAULT_CYCLE_START.value,
    "transition_mode": DEFAULT_TRANSITION_MODE.value,
}

# =============================================================================
# LOCKING
# =============================================================================

# First key of pg_try_advisory_lock(int, int); the second is the store id
SCHEDULING_LOCK_NAMESPACE = 4201

# =============================================================================
# WORKER
# =============================================================================

DAILY_SCHEDULING_JOB_ID = "daily_evaluation_scheduling"
REMINDER_JOB_ID = "evaluation_reminders"
SCHEDULER_MISFIRE_GRACE_TIME_SECONDS = 300
