"""Periodic execution of ingestion runs."""

from .service import SchedulerService

__all__ = [
    "SchedulerService",
]
