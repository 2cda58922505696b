"""Ingestion pipeline orchestration."""

from .models import IngestionRunResult
from .runner import IngestionPipeline

__all__ = ["IngestionPipeline", "IngestionRunResult"]
