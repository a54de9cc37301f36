"""
SMTP sync service - copies SMTP credentials from a Secret into a realm.

One sync is a linear pipeline with an early exit at every step:

1. ignore Secrets other than the configured one
2. read the Secret
3. decode username, password and hostname
4. log in to Keycloak as admin
5. read the realm
6. overwrite host, user and password of the realm's SMTP settings
7. write the realm back

Failures are logged and end the sync. Nothing is retried; the next
modification of the Secret starts a fresh sync.
"""

import asyncio
import logging
import time

from kubernetes import client

from keycloak_smtp_sync.errors import KeycloakAdminError, KubernetesAPIError
from keycloak_smtp_sync.models import (
    MailCredentials,
    RuntimeConfig,
    apply_mail_credentials,
)
from keycloak_smtp_sync.observability.logging import SyncLogger, set_correlation_id
from keycloak_smtp_sync.utils.keycloak_admin import KeycloakAdminClient
from keycloak_smtp_sync.utils.kubernetes import read_secret

logger = logging.getLogger(__name__)


class SmtpSyncService:
    """Pushes the watched Secret's SMTP credentials into the Keycloak realm."""

    def __init__(
        self,
        config: RuntimeConfig,
        core_api: client.CoreV1Api,
        keycloak_client: KeycloakAdminClient,
    ) -> None:
        self.config = config
        self.core_api = core_api
        self.keycloak_client = keycloak_client
        self.sync_logger = SyncLogger(__name__)

    def is_target(self, secret_name: str | None) -> bool:
        """Whether a Secret name is the one this service syncs."""
        return secret_name == self.config.secret_name

    async def handle_secret_change(self, secret_name: str | None) -> bool:
        """
        Sync the realm's SMTP settings if the changed Secret is the target.

        Args:
            secret_name: Name of the Secret that changed

        Returns:
            True if the realm was updated, False if the Secret was not the
            target or any step failed
        """
        if not self.is_target(secret_name):
            logger.debug(
                f"Ignoring change of secret {secret_name}",
                extra={"resource_name": secret_name, "namespace": self.config.namespace},
            )
            return False

        self.sync_logger.log_sync_start(
            secret_name, self.config.namespace, self.config.realm
        )
        try:
            updated = await self._sync(secret_name)
        finally:
            set_correlation_id("")

        return updated

    async def _sync(self, secret_name: str) -> bool:
        start_time = time.monotonic()
        namespace = self.config.namespace
        realm_name = self.config.realm

        try:
            secret = await asyncio.to_thread(
                read_secret, self.core_api, secret_name, namespace
            )
        except KubernetesAPIError as e:
            self.sync_logger.log_sync_error(
                "fetch_secret", secret_name, namespace, realm_name, e
            )
            return False

        credentials = MailCredentials.from_secret_data(secret.data)

        try:
            token = await self.keycloak_client.login_admin(
                self.config.admin_username, self.config.admin_password, realm_name
            )
        except KeycloakAdminError as e:
            self.sync_logger.log_sync_error(
                "login", secret_name, namespace, realm_name, e
            )
            return False

        try:
            realm = await self.keycloak_client.get_realm(token, realm_name)
        except KeycloakAdminError as e:
            self.sync_logger.log_sync_error(
                "get_realm", secret_name, namespace, realm_name, e
            )
            return False

        apply_mail_credentials(realm, credentials)

        try:
            await self.keycloak_client.update_realm(token, realm)
        except KeycloakAdminError as e:
            self.sync_logger.log_sync_error(
                "update_realm", secret_name, namespace, realm_name, e
            )
            return False

        self.sync_logger.log_sync_success(
            secret_name, namespace, realm_name, time.monotonic() - start_time
        )
        return True
