"""Shared pytest fixtures for unit tests."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from keycloak_smtp_sync.models import RuntimeConfig
from keycloak_smtp_sync.utils.keycloak_admin import AdminToken
from tests.fixtures.keycloak_resources import make_realm, make_secret


@pytest.fixture
def runtime_config():
    return RuntimeConfig(
        keycloak_url="https://keycloak.example.com",
        realm="REV",
        admin_username="admin",
        admin_password="admin",
        namespace="default",
        secret_name="keycloak-smtp-secret",
    )


@pytest.fixture
def mock_core_api():
    """CoreV1Api mock returning the default SMTP Secret."""
    core_api = MagicMock()
    core_api.read_namespaced_secret.return_value = make_secret()
    return core_api


@pytest.fixture
def mock_keycloak_client():
    """KeycloakAdminClient mock with a realm that already has SMTP settings."""
    keycloak_client = MagicMock()
    keycloak_client.login_admin = AsyncMock(
        return_value=AdminToken(access_token="test-token")
    )
    keycloak_client.get_realm = AsyncMock(return_value=make_realm())
    keycloak_client.update_realm = AsyncMock(return_value=None)
    return keycloak_client


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test reconfigures them."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
