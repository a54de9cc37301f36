"""Centralized process settings using pydantic-settings.

This module provides a single source of truth for all configuration loaded
from environment variables. Unset or empty variables fall back to the
documented defaults.
"""

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from keycloak_smtp_sync.errors import ConfigurationError


class Settings(BaseSettings):
    """Process configuration loaded from environment variables.

    Values are not checked against Keycloak at startup; a wrong URL or
    credential shows up later as an authentication failure in the logs.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Keycloak admin access
    keycloak_url: str = Field(
        default="keycloak.example.com",
        validation_alias="KC_URL",
        description="Base URL of the Keycloak server",
    )
    keycloak_realm: str = Field(
        default="REV",
        validation_alias="KC_REALM",
        description="Realm whose SMTP settings are managed (also the login realm)",
    )
    keycloak_admin_user: str = Field(
        default="admin",
        validation_alias="KC_ADMIN_USER",
        description="Admin username for the password grant",
    )
    keycloak_admin_password: str = Field(
        default="admin",
        validation_alias="KC_ADMIN_PASS",
        description="Admin password for the password grant",
    )

    # Kubernetes
    smtp_secret_name: str = Field(
        default="keycloak-smtp-secret",
        validation_alias="KEYCLOAK_SMTP_SECRET",
        description="Name of the Secret holding username, password and hostname",
    )
    kubeconfig: str | None = Field(
        default=None,
        validation_alias="KUBECONFIG",
        description="Path to a kubeconfig file; unset means in-cluster credentials",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs to group one sync action",
    )


def load_settings() -> Settings:
    """
    Read settings from the environment.

    Returns:
        Populated Settings instance

    Raises:
        ConfigurationError: If a variable cannot be coerced to its field type
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid environment configuration: {e}",
            user_action="Fix the environment variables listed above",
            cause=e,
        ) from e
