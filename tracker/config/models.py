"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range

# Legacy fallback identity. Kept as the default batch actor so that runs
# without a verified user keep writing to the same owner until a provisioned
# batch account is configured.
PLACEHOLDER_ACTOR_ID = "b518c5d5-2139-413e-ba3d-2e0f9dcd30aa"

DEFAULT_SEARCH_URL = (
    "https://www.linkedin.com/jobs/search/?keywords=Software%20Engineer"
    "&location=United%20States&f_TPR=r86400&geoId=103644278&refresh=true"
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/99.0.4844.51 Safari/537.36"
)

DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]


class Platform(str, Enum):
    """Supported listing platforms."""

    LINKEDIN = "linkedin"


class IdentityPolicy(str, Enum):
    """What to do when a request carries no verifiable identity."""

    REQUIRE = "require"
    BATCH_ACTOR = "batch_actor"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SourceConfig(BaseModel):
    """The paginated listing source an ingestion run walks."""

    name: str = Field("LinkedIn Jobs", min_length=1, description="Human-readable source name")
    platform: Platform = Field(Platform.LINKEDIN, description="Listing platform")
    search_url: str = Field(DEFAULT_SEARCH_URL, description="Search results URL to start from")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("search_url")
    @classmethod
    def validate_search_url(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped.startswith(("http://", "https://")):
            raise ValueError("search_url must be an absolute http(s) URL")
        return stripped

    model_config = {"use_enum_values": True}


class SettlePolicy(BaseModel):
    """Bounded backoff used to wait for client-rendered results after paging."""

    initial_delay_ms: int = Field(500, ge=50, le=10000, description="First poll delay")
    backoff_multiplier: float = Field(2.0, ge=1.0, le=5.0, description="Delay growth per poll")
    max_delay_ms: int = Field(4000, ge=50, le=30000, description="Cap on a single poll delay")
    max_wait_ms: int = Field(15000, ge=100, le=120000, description="Total time budget per page")

    @model_validator(mode="after")
    def validate_bounds(self):
        if self.max_delay_ms < self.initial_delay_ms:
            raise ValueError("max_delay_ms must be >= initial_delay_ms")
        if self.max_wait_ms < self.initial_delay_ms:
            raise ValueError("max_wait_ms must be >= initial_delay_ms")
        return self

    def delays(self):
        """Yield successive poll delays (ms) until the wait budget is spent."""
        delay = float(self.initial_delay_ms)
        spent = 0
        while spent < self.max_wait_ms:
            step = int(min(delay, self.max_delay_ms, self.max_wait_ms - spent))
            yield step
            spent += step
            delay *= self.backoff_multiplier


class ExtractionConfig(BaseModel):
    """Browser and pagination settings for the source extractor."""

    max_pages: int = Field(3, ge=1, le=10, description="Page-count ceiling per run")
    max_listings_per_page: int = Field(25, ge=1, le=100, description="Listing cap per page")
    navigation_timeout_ms: int = Field(60000, ge=1000, le=300000)
    listing_timeout_ms: int = Field(20000, ge=1000, le=120000)
    headless: bool = Field(True, description="Run Chromium without a window")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1)
    browser_args: List[str] = Field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    settle: SettlePolicy = Field(default_factory=SettlePolicy)

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class RecordingConfig(BaseModel):
    """Bulk recorder settings."""

    skip_existing_urls: bool = Field(
        False,
        description="Skip listings whose URL is already recorded for the actor",
    )


class IdentityConfig(BaseModel):
    """Actor identity resolution settings."""

    policy: IdentityPolicy = Field(IdentityPolicy.BATCH_ACTOR)
    batch_actor_id: str = Field(PLACEHOLDER_ACTOR_ID, min_length=1)
    verification_timeout: int = Field(10, ge=1, le=60, description="Seconds")

    @field_validator("batch_actor_id")
    @classmethod
    def strip_batch_actor(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("batch_actor_id cannot be empty")
        return stripped

    model_config = {"use_enum_values": True}


class ApiConfig(BaseModel):
    """HTTP trigger settings."""

    host: str = Field("127.0.0.1")
    port: int = Field(8000, ge=1, le=65535)
    cors_allow_origin: str = Field("*")
    cors_allow_headers: str = Field("authorization, x-client-info, apikey, content-type")
    cors_allow_methods: str = Field("GET, POST, PUT, PATCH, DELETE, OPTIONS")
    include_stack_traces: bool = Field(
        False, description="Add a 'stack' field to 500 responses"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="json or key-value")

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the ingestion service."""

    source: SourceConfig = Field(default_factory=SourceConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    scan_interval: Optional[str] = Field(
        None, description="Interval for daemon mode; unset disables scheduling"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Computed field
    scan_interval_seconds: Optional[int] = None

    @field_validator("scan_interval")
    @classmethod
    def validate_scan_interval(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        try:
            validate_duration_range(parse_duration(v))
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_scan_interval_seconds(self):
        if self.scan_interval is not None:
            self.scan_interval_seconds = parse_duration(self.scan_interval)
        return self
