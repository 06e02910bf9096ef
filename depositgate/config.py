"""Service configuration — env-driven via pydantic-settings.

Reads from a .env file and DEPOSITGATE_* environment variables.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GateConfigError(RuntimeError):
    """Raised when the configuration cannot be used in the current environment."""


class GateSettings(BaseSettings):
    """Deposit gate settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export DEPOSITGATE_ENVIRONMENT=staging
        export DEPOSITGATE_LOG_LEVEL=DEBUG
        export DEPOSITGATE_CHUNK_SIZE=1048576

    Or via .env file::

        DEPOSITGATE_ENVIRONMENT=production
        DEPOSITGATE_PORT=9000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DEPOSITGATE_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Verification limits
    chunk_size: int = Field(default=64 * 1024, gt=0)  # bytes per read
    max_manifest_bytes: int = Field(default=16 * 1024 * 1024, gt=0)
    max_upload_parts: int = Field(default=1000, gt=0)

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


def enforce_production_constraints(config: GateSettings) -> None:
    """Fail hard if production-critical settings are wrong.

    Only applies when ``config.is_production`` is True.
    """
    if not config.is_production:
        return

    if config.debug:
        raise GateConfigError(
            "debug=True is not allowed in production. "
            "Set DEPOSITGATE_DEBUG=false."
        )


# Module-level singleton: import as `from depositgate.config import settings`
settings = GateSettings()
