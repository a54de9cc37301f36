"""
Constants used throughout the SMTP sync process.

This module defines:
- Keycloak admin API defaults
- Kubernetes watch tuning values
- Secret and realm keys that carry SMTP credentials
"""

# Keycloak admin API
ADMIN_CLIENT_ID = "admin-cli"
KEYCLOAK_REQUEST_TIMEOUT_SECONDS = 60

# Namespace whose resolved name is used as the watch namespace
DEFAULT_NAMESPACE = "default"

# Watch behavior
WATCH_TIMEOUT_SECONDS = 60  # Per-connection server timeout
WATCH_RESTART_DELAY_SECONDS = 1.0  # Pause before re-opening a dropped watch
HTTP_STATUS_GONE = 410  # Resource version too old

# Keys read from the watched Secret's data
SECRET_USERNAME_KEY = "username"
SECRET_PASSWORD_KEY = "password"
SECRET_HOSTNAME_KEY = "hostname"

# Keys overwritten in the realm's smtpServer map
REALM_SMTP_FIELD = "smtpServer"
SMTP_HOST_KEY = "host"
SMTP_USER_KEY = "user"
SMTP_PASSWORD_KEY = "password"
