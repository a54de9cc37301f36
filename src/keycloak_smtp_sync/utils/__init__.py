"""
Utils package - clients for the two APIs the sync process talks to.

Contains helper modules for:
- Keycloak Admin API interactions
- Kubernetes client construction and Secret access
- The reconnecting Secret watch
"""

from keycloak_smtp_sync.utils.keycloak_admin import AdminToken, KeycloakAdminClient
from keycloak_smtp_sync.utils.kubernetes import (
    get_kubernetes_client,
    read_secret,
    resolve_namespace,
)
from keycloak_smtp_sync.utils.watch import RetryWatcher, WatchEvent, WatchEventType

__all__ = [
    "AdminToken",
    "KeycloakAdminClient",
    "get_kubernetes_client",
    "read_secret",
    "resolve_namespace",
    "RetryWatcher",
    "WatchEvent",
    "WatchEventType",
]
