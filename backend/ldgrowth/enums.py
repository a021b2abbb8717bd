# backend/ldgrowth/enums.py
"""
Application Enums - Centralized enum definitions.

This module contains all enum definitions to break circular imports between
constants.py and the pydantic models. By centralizing enums here, both modules
can import them without creating circular dependencies.
"""

from enum import Enum


# =============================================================================
# EMPLOYEE SYSTEM
# =============================================================================


class EmployeeStatus(str, Enum):
    """Employment status. Only active employees are scheduled."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Position(str, Enum):
    """Store positions, lowest to highest."""

    TEAM_MEMBER = "Team Member"
    TRAINER = "Trainer"
    LEADER = "Leader"
    DIRECTOR = "Director"


class ChangeType(str, Enum):
    """Employee lifecycle changes that affect evaluation timing."""

    ROLE_CHANGE = "role_change"
    TRANSFER = "transfer"


# =============================================================================
# EVALUATION SYSTEM
# =============================================================================


class EvaluationStatus(str, Enum):
    """Evaluation workflow states. Must be: pending_self_evaluation → pending_manager_review → in_review_session → completed."""

    PENDING_SELF_EVALUATION = "pending_self_evaluation"
    PENDING_MANAGER_REVIEW = "pending_manager_review"
    IN_REVIEW_SESSION = "in_review_session"
    COMPLETED = "completed"
    MISSED = "missed"


class SchedulingType(str, Enum):
    """How an evaluation came to exist."""

    AUTO = "auto"
    MANUAL = "manual"


class BaseDateSource(str, Enum):
    """Where the anchor date for the next evaluation came from."""

    PENDING_EVALUATION = "pending_evaluation"
    COMPLETED_EVALUATION = "completed_evaluation"
    HIRE_DATE = "hire_date"


class CycleStart(str, Enum):
    """Store cycle policy for evaluation spacing."""

    HIRE_DATE = "hire_date"
    CALENDAR_YEAR = "calendar_year"
    FISCAL_YEAR = "fiscal_year"
    CUSTOM = "custom"


class TransitionMode(str, Enum):
    """Policy applied when an unresolved evaluation already exists."""

    IMMEDIATE = "immediate"
    COMPLETE_CYCLE = "complete_cycle"
    ALIGN_NEXT = "align_next"


class SkipReason(str, Enum):
    """Reasons an employee is left out of a scheduling run."""

    NO_EVALUATOR = "no_evaluator"
    ON_LEAVE = "on_leave"
    LEAVE_GRACE_PERIOD = "leave_grace_period"
    EVALUATOR_ON_LEAVE = "evaluator_on_leave"
    MINIMUM_EMPLOYMENT = "minimum_employment"
    CHANGE_COOLDOWN = "change_cooldown"
    EVALUATION_ALREADY_SCHEDULED = "evaluation_already_scheduled"
    DUPLICATE = "duplicate"


# =============================================================================
# NOTIFICATION SYSTEM
# =============================================================================


class NotificationType(str, Enum):
    """In-app notification categories."""

    EVALUATION_ASSIGNED = "evaluation_assigned"
    EVALUATION_CREATED = "evaluation_created"
    EVALUATION_REMINDER = "evaluation_reminder"


# =============================================================================
# ERROR SYSTEM
# =============================================================================


class ErrorCategory(str, Enum):
    """Categories used to tag every application error."""

    SCHEDULING = "scheduling"
    VALIDATION = "validation"
    SETTINGS = "settings"
    DATABASE = "database"
    SYSTEM = "system"


# =============================================================================
# LOGGING SYSTEM
# =============================================================================


class LogLevel(str, Enum):
    """Log level constants for centralized logging system."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogSource(str, Enum):
    """Log source constants for identifying log origins."""

    API = "api"
    WORKER = "worker"
    SYSTEM = "system"
    DATABASE = "database"
    SCHEDULER = "scheduler"


class LogEmoji(str, Enum):
    """Type-safe emoji constants for log messages."""

    # Status emojis
    SUCCESS = "✅"
    FAILED = "❌"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    DEBUG = "🐞"
    SKIPPED = "⏭️"

    # Work emojis
    PROCESSING = "🔄"
    SCHEDULED = "📅"
    RETRY = "🔁"
    LOCK = "🔒"
    ANOMALY = "🧭"

    # System emojis
    SYSTEM = "⚙️"
    STARTUP = "🚀"
    SHUTDOWN = "🛑"
    SETTINGS = "🛠️"
    REPAIR = "🩹"
    EMAIL = "📧"
    NOTIFICATION = "🔔"


class LoggerName(str, Enum):
    """Logger name constants for categorizing log entries."""

    # API loggers
    API = "api"
    ERROR_HANDLER = "error_handler"

    # Worker loggers
    SCHEDULER_WORKER = "scheduler_worker"

    # Service loggers
    SETTINGS_SERVICE = "settings_service"
    SCHEDULING_SERVICE = "scheduling_service"
    ELIGIBILITY_SERVICE = "eligibility_service"
    WORKLOAD_SERVICE = "workload_service"
    REMINDER_SERVICE = "reminder_service"
    NOTIFICATION_SERVICE = "notification_service"
    EMAIL_SERVICE = "email_service"

    # System loggers
    SYSTEM = "system"
    DATABASE = "database"
    RETRY = "retry"
