"""
Configuration module for the Branch Bridge.

This module uses Pydantic Settings to load and validate environment variables
for the credential allow-list, the listening socket, logging and the upstream
HTTP client.

Environment variables are loaded from .env file or system environment.
"""

from functools import lru_cache
from typing import FrozenSet, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The allow-list is the only security-relevant value; everything else has a
    usable default so the bridge can start with an empty environment.
    """

    # =========================================================================
    # Credential Allow-List
    # =========================================================================

    ALLOWED_BRANCH_KEYS: str = Field(
        default="",
        description="Comma-separated list of Branch keys allowed through the bridge (e.g., 'key_live_a,key_live_b')",
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    BRIDGE_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the bridge server",
    )

    PORT: int = Field(
        default=3000,
        description="Port to bind the bridge server",
        ge=1,
        le=65535,
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # Upstream Client Configuration
    # =========================================================================

    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Total timeout for a single upstream call in seconds",
        gt=0,
    )

    # =========================================================================
    # Pydantic Settings Configuration
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_keys_list(self) -> List[str]:
        """
        Parse ALLOWED_BRANCH_KEYS into a clean list.

        Entries are whitespace-trimmed and empty entries are discarded.
        Case is preserved since keys are compared verbatim.
        """
        if not self.ALLOWED_BRANCH_KEYS:
            return []

        return [
            key.strip()
            for key in self.ALLOWED_BRANCH_KEYS.split(",")
            if key.strip()
        ]

    @property
    def allowed_keys(self) -> FrozenSet[str]:
        """The immutable allow-list consulted by the credential gate."""
        return frozenset(self.allowed_keys_list)

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate LOG_LEVEL is a standard logging level name.

        Raises:
            ValueError: If the level is not recognised
        """
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        level = v.strip().upper()
        if level not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return level


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    This function is cached so that the settings are loaded only once
    during the application lifecycle.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If environment variables are invalid.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> dict:
    """
    Validate configuration settings and return a status report.

    Called during application startup. An empty allow-list is legal, it only
    means every request will be rejected, so it is reported as a warning.

    Example:
        >>> status = validate_configuration(get_settings())
        >>> for warning in status["warnings"]:
        ...     print(warning)
    """
    warnings = []

    if not settings.allowed_keys_list:
        warnings.append(
            "No allowed Branch keys configured in ALLOWED_BRANCH_KEYS. "
            "All requests will be blocked."
        )

    if settings.UPSTREAM_TIMEOUT_SECONDS > 120:
        warnings.append("UPSTREAM_TIMEOUT_SECONDS is above 120s (slow upstream calls will hold connections)")

    return {
        "warnings": warnings,
        "allowed_key_count": len(settings.allowed_keys_list),
        "port": settings.PORT,
    }
