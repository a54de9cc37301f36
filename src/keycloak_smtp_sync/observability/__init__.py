"""
Observability utilities for the SMTP sync process.

This module provides structured logging with correlation IDs.
"""

from .logging import SyncLogger, setup_structured_logging

__all__ = [
    "SyncLogger",
    "setup_structured_logging",
]
