"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os
from dataclasses import dataclass
from enum import Enum

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


class DeploymentEnvironment(str, Enum):
    """Deployment target. Unknown values resolve to production."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str | None) -> "DeploymentEnvironment":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.PRODUCTION


@dataclass(frozen=True)
class EnvironmentProfile:
    """Environment-dependent behavior, resolved once from DeploymentEnvironment."""

    environment: DeploymentEnvironment
    cors_origins: tuple[str, ...]
    cors_allow_any_origin: bool
    rate_limit_bypass: bool
    expose_error_details: bool
    strict_transport_security: bool


_PROFILES: dict[DeploymentEnvironment, EnvironmentProfile] = {
    DeploymentEnvironment.DEVELOPMENT: EnvironmentProfile(
        environment=DeploymentEnvironment.DEVELOPMENT,
        cors_origins=("http://localhost:8000", "http://127.0.0.1:8000"),
        cors_allow_any_origin=True,
        rate_limit_bypass=True,
        expose_error_details=True,
        strict_transport_security=False,
    ),
    DeploymentEnvironment.STAGING: EnvironmentProfile(
        environment=DeploymentEnvironment.STAGING,
        cors_origins=(
            "https://staging.nomoji.dev",
            "https://nomoji.dev",
            "https://api.nomoji.dev",
        ),
        cors_allow_any_origin=False,
        rate_limit_bypass=False,
        expose_error_details=True,
        strict_transport_security=False,
    ),
    DeploymentEnvironment.PRODUCTION: EnvironmentProfile(
        environment=DeploymentEnvironment.PRODUCTION,
        cors_origins=(
            "https://nomoji.dev",
            "https://api.nomoji.dev",
            "https://www.nomoji.dev",
        ),
        cors_allow_any_origin=False,
        rate_limit_bypass=False,
        expose_error_details=False,
        strict_transport_security=True,
    ),
}


def resolve_environment_profile(environment: DeploymentEnvironment) -> EnvironmentProfile:
    """Return the immutable profile for a deployment environment."""
    return _PROFILES[environment]


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "nomoji"
    app_version: str = "1.0.0"
    environment: DeploymentEnvironment = DeploymentEnvironment.PRODUCTION
    debug: bool = False
    log_level: str = "INFO"
    public_base_url: str = "https://nomoji.dev"

    # Database (postgresql+psycopg for psycopg3; sqlite:// works for local runs and tests)
    database_url: str = "postgresql+psycopg://localhost:5432/nomoji_dev"
    db_connect_timeout: int = 10  # seconds

    # Security
    internal_job_token: str = ""  # Required for /internal/* endpoints
    max_request_bytes: int = 100 * 1024

    # Rate limiting and analytics
    rate_limit_enabled: bool = True
    analytics_enabled: bool = True

    # Retention
    shared_config_ttl_days: int = 30
    config_max_age_days: int = 30  # scheduled sweep deletes shared configs older than this
    metrics_snapshot_ttl_days: int = 7

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.app_version = os.getenv("APP_VERSION", self.app_version)
        self.environment = DeploymentEnvironment.parse(
            os.getenv("ENVIRONMENT", self.environment.value)
        )
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()
        self.public_base_url = os.getenv("PUBLIC_BASE_URL", self.public_base_url).rstrip("/")

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'nomoji_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.internal_job_token = os.getenv("INTERNAL_JOB_TOKEN", "")
        self.max_request_bytes = int(
            os.getenv("MAX_REQUEST_BYTES", str(self.max_request_bytes))
        )

        self.rate_limit_enabled = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
        self.analytics_enabled = os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"

        self.shared_config_ttl_days = int(
            os.getenv("SHARED_CONFIG_TTL_DAYS", str(self.shared_config_ttl_days))
        )
        self.config_max_age_days = int(
            os.getenv("CONFIG_MAX_AGE_DAYS", str(self.config_max_age_days))
        )
        self.metrics_snapshot_ttl_days = int(
            os.getenv("METRICS_SNAPSHOT_TTL_DAYS", str(self.metrics_snapshot_ttl_days))
        )

    @property
    def profile(self) -> EnvironmentProfile:
        """Environment-dependent behavior for the configured deployment target."""
        return resolve_environment_profile(self.environment)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")
