"""Domain models for the ingestion service."""

from .models import (
    ActorIdentity,
    ApplicationRecord,
    ApplicationStatus,
    ExtractedListing,
    IdentitySource,
    IngestionStatus,
)

__all__ = [
    "ExtractedListing",
    "ApplicationRecord",
    "ActorIdentity",
    "IngestionStatus",
    "ApplicationStatus",
    "IdentitySource",
]
