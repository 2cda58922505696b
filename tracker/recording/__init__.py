"""Bulk recording of extracted listings into the application store."""

from .models import RecordResult
from .recorder import BulkRecorder
from .store import ApplicationStore, SqlApplicationStore

__all__ = [
    "BulkRecorder",
    "RecordResult",
    "ApplicationStore",
    "SqlApplicationStore",
]
