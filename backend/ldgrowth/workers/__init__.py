"""
Workers for the LD Growth worker process.
"""

from .base_worker import BaseWorker
from .scheduler_worker import SchedulerWorker

__all__ = ["BaseWorker", "SchedulerWorker"]
