"""Flask application exposing the ingestion trigger and tracker endpoints."""

import traceback
from typing import Optional, Tuple

from flask import Flask, Response, jsonify, request

from tracker.config.models import ApiConfig
from tracker.domain.models import ApplicationRecord, ApplicationStatus
from tracker.identity.exceptions import IdentityRequiredError
from tracker.identity.resolver import IdentityResolver
from tracker.logging import get_logger
from tracker.persistence.exceptions import RecordNotFoundError
from tracker.pipeline.runner import IngestionPipeline
from tracker.recording.store import SqlApplicationStore
from tracker.utils.timestamps import start_of_day, utc_now

from .serializers import application_payload, run_payload

logger = get_logger(__name__, component="api")

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
APPLY_REQUIRED_FIELDS = ("jobTitle", "company", "userId")
RECENT_APPLICATIONS_LIMIT = 10
STATUS_VALUES = tuple(status.value for status in ApplicationStatus)


def _optional_text(data: dict, name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    return str(value)


def create_app(
    pipeline: IngestionPipeline,
    resolver: IdentityResolver,
    store: SqlApplicationStore,
    api_config: Optional[ApiConfig] = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        pipeline: Runs extraction and recording for the trigger endpoint
        resolver: Resolves the actor from the Authorization header
        store: Application store used by the apply and metrics endpoints
        api_config: CORS and error-detail settings (defaults when omitted)

    Returns:
        Configured Flask app
    """
    api_config = api_config or ApiConfig()
    app = Flask(__name__)

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = api_config.cors_allow_origin
        response.headers["Access-Control-Allow-Headers"] = api_config.cors_allow_headers
        response.headers["Access-Control-Allow-Methods"] = api_config.cors_allow_methods
        return response

    register_routes(app, pipeline, resolver, store, api_config)
    return app


def register_routes(
    app: Flask,
    pipeline: IngestionPipeline,
    resolver: IdentityResolver,
    store: SqlApplicationStore,
    api_config: ApiConfig,
) -> None:
    """Register all routes with the app instance."""

    def error_response(message: str, status: int, include_stack: bool = False) -> Tuple[Response, int]:
        body = {"error": message}
        if include_stack and api_config.include_stack_traces:
            body["stack"] = traceback.format_exc()
        return jsonify(body), status

    @app.route("/scrape-linkedin-jobs", methods=ALL_METHODS)
    def scrape_linkedin_jobs():
        """Run one ingestion for the resolved actor. Any non-OPTIONS method triggers."""
        if request.method == "OPTIONS":
            return "", 200

        try:
            actor = resolver.resolve(request.headers.get("Authorization"))
        except IdentityRequiredError as e:
            return error_response(str(e), 401)

        try:
            result = pipeline.run_once(actor)
        except Exception as e:
            logger.error(
                f"Ingestion request failed: {e}",
                extra={"event": "api.ingest.failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return error_response(str(e), 500, include_stack=True)

        if result.skipped:
            return error_response("An ingestion run is already in progress", 409)

        return jsonify(run_payload(result)), 200

    @app.route("/apply-to-job", methods=ALL_METHODS)
    def apply_to_job():
        """Record an application the user submitted themselves."""
        if request.method == "OPTIONS":
            return "", 200
        if request.method != "POST":
            return error_response("Method not allowed", 405)

        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict) or not all(data.get(name) for name in APPLY_REQUIRED_FIELDS):
            return error_response("Missing required fields", 400)

        try:
            record = store.insert(
                ApplicationRecord(
                    actor_id=str(data["userId"]),
                    title=str(data["jobTitle"]),
                    organization=str(data["company"]),
                    description=_optional_text(data, "jobDescription"),
                    location=_optional_text(data, "location"),
                    compensation=_optional_text(data, "salary"),
                    platform=_optional_text(data, "platform"),
                    source_url=_optional_text(data, "jobUrl"),
                    status=ApplicationStatus.APPLIED.value,
                )
            )
        except Exception as e:
            logger.error(
                f"Failed to record application: {e}",
                extra={"event": "api.apply.failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return error_response(str(e), 500, include_stack=True)

        logger.info(
            "Application recorded",
            extra={"event": "api.apply.recorded", "actor_id": record.actor_id},
        )
        return jsonify({"success": True, "application": application_payload(record)}), 200

    @app.route("/metrics", methods=["GET", "OPTIONS"])
    def metrics():
        """Dashboard counters for the resolved actor."""
        if request.method == "OPTIONS":
            return "", 200

        try:
            actor = resolver.resolve(request.headers.get("Authorization"))
        except IdentityRequiredError as e:
            return error_response(str(e), 401)

        try:
            counters = store.metrics(actor.actor_id, start_of_day(utc_now()))
        except Exception as e:
            logger.error(
                f"Failed to compute metrics: {e}",
                extra={"event": "api.metrics.failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return error_response(str(e), 500, include_stack=True)

        return jsonify(counters), 200

    @app.route("/applications", methods=["GET", "OPTIONS"])
    def list_applications():
        """The resolved actor's most recent applications, newest first."""
        if request.method == "OPTIONS":
            return "", 200

        try:
            actor = resolver.resolve(request.headers.get("Authorization"))
        except IdentityRequiredError as e:
            return error_response(str(e), 401)

        try:
            records = store.list_for_actor(actor.actor_id, limit=RECENT_APPLICATIONS_LIMIT)
        except Exception as e:
            logger.error(
                f"Failed to list applications: {e}",
                extra={"event": "api.applications.list_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return error_response(str(e), 500, include_stack=True)

        return jsonify({"applications": [application_payload(r) for r in records]}), 200

    @app.route("/applications/<record_id>", methods=["PATCH", "OPTIONS"])
    def update_application(record_id: str):
        """Move one of the actor's applications to a new status.

        Body: ``{"status": "Interview"}``. Records owned by other actors are
        reported as not found.
        """
        if request.method == "OPTIONS":
            return "", 200

        try:
            actor = resolver.resolve(request.headers.get("Authorization"))
        except IdentityRequiredError as e:
            return error_response(str(e), 401)

        data = request.get_json(silent=True) or {}
        status = data.get("status") if isinstance(data, dict) else None
        if status not in STATUS_VALUES:
            return error_response(f"status must be one of: {', '.join(STATUS_VALUES)}", 400)

        try:
            record = store.update_status(actor.actor_id, record_id, status)
        except RecordNotFoundError:
            return error_response("Application not found", 404)
        except Exception as e:
            logger.error(
                f"Failed to update application {record_id}: {e}",
                extra={"event": "api.applications.update_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return error_response(str(e), 500, include_stack=True)

        logger.info(
            f"Application {record_id} moved to {status}",
            extra={"event": "api.applications.updated", "actor_id": actor.actor_id, "status": status},
        )
        return jsonify({"success": True, "application": application_payload(record)}), 200

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "ingestionRunning": pipeline.is_running}), 200
