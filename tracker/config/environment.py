"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/tracker.db"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        supabase_url: Optional[str] = None,
        supabase_service_role_key: Optional[str] = None,
        batch_actor_id: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.supabase_url = supabase_url.rstrip("/") if supabase_url else None
        self.supabase_service_role_key = supabase_service_role_key
        self.batch_actor_id = batch_actor_id
        self.log_level = log_level
        self.environment = environment or "local"

    @property
    def identity_verification_enabled(self) -> bool:
        """Whether credentials for the identity provider are present."""
        return bool(self.supabase_url and self.supabase_service_role_key)


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - DATABASE_URL: SQLAlchemy URL for the application store
      (default: sqlite:///./data/tracker.db)
    - SUPABASE_URL: Base URL of the identity provider used to verify bearer tokens
    - SUPABASE_SERVICE_ROLE_KEY: API key sent alongside token verification requests
    - BATCH_ACTOR_ID: Overrides identity.batch_actor_id from the config file
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - ENVIRONMENT: Environment label attached to every log record

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If variables are inconsistent or invalid
    """
    errors = []

    database_url = os.getenv("DATABASE_URL")
    supabase_url = os.getenv("SUPABASE_URL")
    service_role_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    batch_actor_id = os.getenv("BATCH_ACTOR_ID")
    log_level = os.getenv("LOG_LEVEL")
    environment = os.getenv("ENVIRONMENT")

    if supabase_url and not service_role_key:
        errors.append(
            "SUPABASE_URL is set but SUPABASE_SERVICE_ROLE_KEY is not. Both must be set for token verification."
        )
    elif service_role_key and not supabase_url:
        errors.append(
            "SUPABASE_SERVICE_ROLE_KEY is set but SUPABASE_URL is not. Both must be set for token verification."
        )

    if supabase_url and not supabase_url.startswith(("http://", "https://")):
        errors.append(f"Invalid SUPABASE_URL: '{supabase_url}'. Must be an http(s) URL.")

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if batch_actor_id is not None and not batch_actor_id.strip():
        errors.append("BATCH_ACTOR_ID is set but empty")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY together, or neither",
            ],
        )

    return EnvironmentConfig(
        database_url=database_url,
        supabase_url=supabase_url,
        supabase_service_role_key=service_role_key,
        batch_actor_id=batch_actor_id.strip() if batch_actor_id else None,
        log_level=log_level.upper() if log_level else None,
        environment=environment,
    )
