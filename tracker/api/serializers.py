"""JSON payload shapes for the HTTP API.

Field names follow the tracker's ``applications`` table so that clients
can insert or display payloads without renaming.
"""

from typing import Any, Dict

from tracker.domain.models import ApplicationRecord, ExtractedListing
from tracker.pipeline.models import IngestionRunResult
from tracker.utils.timestamps import format_timestamp


def listing_payload(listing: ExtractedListing) -> Dict[str, Any]:
    return {
        "job_title": listing.title,
        "company": listing.organization,
        "job_description": listing.description,
        "location": listing.location,
        "salary": listing.compensation,
        "job_url": listing.source_url,
        "platform": listing.source_platform,
        "status": listing.ingestion_status,
    }


def application_payload(record: ApplicationRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.actor_id,
        "job_title": record.title,
        "company": record.organization,
        "job_description": record.description,
        "location": record.location,
        "salary": record.compensation,
        "job_url": record.source_url,
        "platform": record.platform,
        "status": record.status,
        "created_at": format_timestamp(record.created_at, include_microseconds=True)
        if record.created_at
        else None,
    }


def run_payload(result: IngestionRunResult) -> Dict[str, Any]:
    """Response body for a completed ingestion run."""
    extraction = result.extraction
    return {
        "jobs": [listing_payload(listing) for listing in result.listings],
        "pageTitle": extraction.page_title if extraction else "",
        "successfulInserts": result.successful_inserts,
        "attemptedInserts": result.attempted_inserts,
        "pagesScraped": extraction.pages_scraped if extraction else 0,
        "stopReason": extraction.stop_reason.value if extraction else None,
        "stopDetail": extraction.stop_detail if extraction else None,
        "runId": result.run_id,
        "actorSource": result.actor.source if result.actor else None,
    }
