"""
Sync error hierarchy with categorization and user guidance.

Every failure the process knows how to describe is raised as a SyncError
subclass. The watch loop and the sync action log these at the point where
they are caught; only configuration errors stop the process.
"""


class SyncError(Exception):
    """
    Base error class for all sync-related exceptions.

    Provides categorization and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize sync error.

        Args:
            message: Human-readable error description
            category: Error category (configuration, external)
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.user_action = user_action
        self.cause = cause

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ExternalServiceError(SyncError):
    """Error communicating with external services."""

    def __init__(
        self,
        service: str,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        action = user_action or f"Check {service} connectivity and credentials"
        super().__init__(
            message=f"{service} error: {message}",
            category="external",
            user_action=action,
            cause=cause,
        )
        self.service = service


class KeycloakAdminError(ExternalServiceError):
    """Error communicating with Keycloak Admin API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        cause: Exception | None = None,
    ):
        if status_code:
            message = f"HTTP {status_code}: {message}"

        super().__init__(
            service="Keycloak Admin API",
            message=message,
            user_action="Check Keycloak instance status and admin credentials",
            cause=cause,
        )
        self.status_code = status_code
        self.response_body = response_body

    def body_preview(self, limit: int = 1024) -> str | None:
        """Return a truncated preview of the response body for logging."""

        if self.response_body is None:
            return None

        if len(self.response_body) <= limit:
            return self.response_body

        return f"{self.response_body[:limit]}...<truncated>"


class KubernetesAPIError(ExternalServiceError):
    """Error communicating with Kubernetes API."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        reason: str | None = None,
        cause: Exception | None = None,
    ):
        if reason:
            message = f"{message} (reason: {reason})"

        super().__init__(
            service="Kubernetes API",
            message=message,
            user_action="Check RBAC permissions and cluster connectivity",
            cause=cause,
        )
        self.status = status
        self.reason = reason


class ConfigurationError(SyncError):
    """Error in process configuration."""

    def __init__(
        self,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="configuration",
            user_action=user_action or "Review and correct configuration",
            cause=cause,
        )
