"""Core domain models for listings, application records and actors.

- ExtractedListing: one job posting snapshot produced by an extractor
- ApplicationRecord: a persisted row in the application tracker
- ActorIdentity: the account on whose behalf records are written
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tracker.utils.timestamps import ensure_utc

NOT_AVAILABLE = "N/A"
NOT_SPECIFIED = "Not specified"
UNRESOLVED_URL = "#"
DESCRIPTION_PLACEHOLDER = "Description placeholder - full scraping needed"


class IngestionStatus(str, Enum):
    """Status stamped on a listing at extraction time."""

    PENDING_REVIEW = "scraped_pending_review"


class ApplicationStatus(str, Enum):
    """Known values of the mutable ``status`` column on application records."""

    PENDING_REVIEW = "scraped_pending_review"
    APPLIED = "Applied"
    INTERVIEW = "Interview"
    REJECTED = "Rejected"
    OFFER = "Offer"


class IdentitySource(str, Enum):
    """How an actor identity was obtained."""

    VERIFIED = "verified"
    BATCH = "batch"


class ExtractedListing(BaseModel):
    """One job posting snapshot.

    Every field has a sentinel so that a card with missing sub-elements still
    produces a listing instead of an error. Blank strings collapse to the
    field's sentinel.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True, validate_default=True)

    title: str = Field(NOT_AVAILABLE, description="Job title")
    organization: str = Field(NOT_AVAILABLE, description="Hiring company")
    location: str = Field(NOT_AVAILABLE, description="Job location")
    compensation: str = Field(NOT_SPECIFIED, description="Free-text salary information")
    source_url: str = Field(UNRESOLVED_URL, description="Absolute link to the posting")
    source_platform: str = Field("LinkedIn", description="Platform the listing came from")
    ingestion_status: IngestionStatus = Field(IngestionStatus.PENDING_REVIEW)
    description: str = Field(DESCRIPTION_PLACEHOLDER, description="Posting description")

    @field_validator("title", "organization", "location", mode="before")
    @classmethod
    def default_missing_text(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            return NOT_AVAILABLE
        return " ".join(str(v).split())

    @field_validator("compensation", mode="before")
    @classmethod
    def default_missing_compensation(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            return NOT_SPECIFIED
        return str(v).strip()

    @field_validator("source_url", mode="before")
    @classmethod
    def default_missing_url(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            return UNRESOLVED_URL
        return str(v).strip()

    def has_resolved_url(self) -> bool:
        """Whether the listing carries a real URL rather than the sentinel."""
        return self.source_url != UNRESOLVED_URL


class ActorIdentity(BaseModel):
    """The account on whose behalf application records are written."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    actor_id: str = Field(..., min_length=1)
    source: IdentitySource

    @property
    def is_verified(self) -> bool:
        return self.source == IdentitySource.VERIFIED.value


class ApplicationRecord(BaseModel):
    """A persisted application-tracker row."""

    id: Optional[str] = Field(None, description="Row identifier, assigned on insert")
    actor_id: str = Field(..., min_length=1, description="Owner of the record")
    title: str
    organization: str
    source_url: str = UNRESOLVED_URL
    status: str = ApplicationStatus.PENDING_REVIEW.value
    platform: str = ""
    description: str = ""
    location: str = ""
    compensation: str = ""
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def ensure_created_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @classmethod
    def from_listing(cls, listing: ExtractedListing, actor: ActorIdentity) -> "ApplicationRecord":
        """Flatten a listing into a record owned by ``actor``."""
        return cls(
            actor_id=actor.actor_id,
            title=listing.title,
            organization=listing.organization,
            source_url=listing.source_url,
            status=IngestionStatus(listing.ingestion_status).value,
            platform=listing.source_platform,
            description=listing.description,
            location=listing.location,
            compensation=listing.compensation,
        )
