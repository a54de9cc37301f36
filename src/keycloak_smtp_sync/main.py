#!/usr/bin/env python3
"""
Keycloak SMTP Sync - Main entry point.

Watches Secrets in the cluster's default namespace and, whenever the
configured Secret is modified, copies its SMTP credentials into a Keycloak
realm through the admin REST API.

Usage:
    keycloak-smtp-sync
    # Or:
    python -m keycloak_smtp_sync

Environment Variables:
    KC_URL: Keycloak base URL (default: keycloak.example.com)
    KC_REALM: Realm to update (default: REV)
    KC_ADMIN_USER / KC_ADMIN_PASS: Admin credentials (default: admin/admin)
    KEYCLOAK_SMTP_SECRET: Secret to watch (default: keycloak-smtp-secret)
    KUBECONFIG: Kubeconfig path; unset means in-cluster credentials
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

import asyncio
import logging
import signal
import sys

from kubernetes import client
from pydantic import ValidationError

from keycloak_smtp_sync.errors import ConfigurationError, KubernetesAPIError
from keycloak_smtp_sync.models import RuntimeConfig
from keycloak_smtp_sync.observability.logging import setup_structured_logging
from keycloak_smtp_sync.services import SmtpSyncService, watch_secrets
from keycloak_smtp_sync.settings import Settings, load_settings
from keycloak_smtp_sync.utils.keycloak_admin import KeycloakAdminClient
from keycloak_smtp_sync.utils.kubernetes import get_kubernetes_client, resolve_namespace
from keycloak_smtp_sync.utils.watch import RetryWatcher

logger = logging.getLogger("keycloak_smtp_sync")


def configure_logging(settings: Settings) -> None:
    """Configure structured logging based on settings."""
    setup_structured_logging(
        log_level=settings.log_level.upper(),
        enable_json_formatting=settings.json_logs,
        correlation_id_enabled=settings.correlation_ids,
    )


def build_runtime_config(settings: Settings, namespace: str) -> RuntimeConfig:
    """
    Assemble the runtime configuration.

    Raises:
        ConfigurationError: If a required value is empty
    """
    try:
        return RuntimeConfig.from_settings(settings, namespace)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid runtime configuration: {e}", cause=e
        ) from e


async def run(settings: Settings) -> int:
    """
    Start the watch loop and block until a termination signal arrives.

    Returns:
        Process exit code
    """
    logger.info("Starting Keycloak SMTP sync...")

    try:
        api_client = get_kubernetes_client(settings.kubeconfig)
    except ConfigurationError as e:
        logger.error(str(e), extra={"error_type": type(e).__name__})
        return 1

    core_api = client.CoreV1Api(api_client)

    try:
        namespace = await asyncio.to_thread(resolve_namespace, core_api)
        config = build_runtime_config(settings, namespace)
    except (KubernetesAPIError, ConfigurationError) as e:
        logger.error(
            f"Failed to start secret watch: {e}",
            extra={"error_type": type(e).__name__},
        )
        api_client.close()
        return 1

    logger.info(
        f"Syncing secret {config.namespace}/{config.secret_name} into realm "
        f"{config.realm} at {config.keycloak_url}",
        extra={
            "namespace": config.namespace,
            "resource_name": config.secret_name,
            "realm_name": config.realm,
        },
    )

    async with KeycloakAdminClient(config.keycloak_url) as keycloak_client:
        sync_service = SmtpSyncService(config, core_api, keycloak_client)
        watcher = RetryWatcher(core_api, config.namespace)
        exit_code = await watch_until_signal(watcher, sync_service)

    api_client.close()
    logger.info("Keycloak SMTP sync stopped")
    return exit_code


async def watch_until_signal(
    watcher: RetryWatcher, sync_service: SmtpSyncService
) -> int:
    """
    Run the watch loop until SIGTERM or SIGINT, then stop the watcher.

    Returns:
        0 after a termination signal, 1 if the watch ended on its own
    """
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop_event.set)

    watch_task = asyncio.create_task(
        watch_secrets(watcher, sync_service), name="secret-watch"
    )
    stop_task = asyncio.create_task(stop_event.wait(), name="stop-signal")

    done, _ = await asyncio.wait(
        {watch_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
    )

    exit_code = 0
    if watch_task in done:
        # The watch only ends on its own through an unexpected error
        exit_code = 1
        if watch_task.exception() is not None:
            logger.error(
                f"Secret watch terminated: {watch_task.exception()}",
                exc_info=watch_task.exception(),
            )
    else:
        logger.info("Received termination signal. Shutting down...")

    watcher.stop()
    for task in (watch_task, stop_task):
        task.cancel()
    await asyncio.gather(watch_task, stop_task, return_exceptions=True)

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.remove_signal_handler(sig)
    return exit_code


def main() -> None:
    """Entry point for the console script."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)
    sys.exit(asyncio.run(run(settings)))


if __name__ == "__main__":
    main()
