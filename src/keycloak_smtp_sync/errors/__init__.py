"""
Error handling module for the SMTP sync process.

This module provides a small error hierarchy that separates configuration
problems from failures of the two external APIs the process talks to.
"""

from .sync_errors import (
    ConfigurationError,
    ExternalServiceError,
    KeycloakAdminError,
    KubernetesAPIError,
    SyncError,
)

__all__ = [
    "SyncError",
    "ExternalServiceError",
    "KeycloakAdminError",
    "KubernetesAPIError",
    "ConfigurationError",
]
