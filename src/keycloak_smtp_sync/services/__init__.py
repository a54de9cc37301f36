"""
Service layer for the SMTP sync process.

Provides the sync action and the watch loop that drives it.
"""

from .secret_watcher import watch_secrets
from .smtp_sync import SmtpSyncService

__all__ = [
    "SmtpSyncService",
    "watch_secrets",
]
