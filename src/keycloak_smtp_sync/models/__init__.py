"""
Models package - Pydantic models for the sync process.

Defines:
- RuntimeConfig, the validated startup configuration
- MailCredentials, the SMTP values carried by the watched Secret
"""

from .config import RuntimeConfig
from .smtp import MailCredentials, apply_mail_credentials

__all__ = ["RuntimeConfig", "MailCredentials", "apply_mail_credentials"]
