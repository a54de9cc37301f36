"""
Watch loop - dispatches Secret events to the SMTP sync service.

Only MODIFIED events are acted on. ADDED, DELETED, BOOKMARK and ERROR events
are observed and dropped; reconnection after errors is handled by the
RetryWatcher itself.
"""

import asyncio
import logging

from keycloak_smtp_sync.services.smtp_sync import SmtpSyncService
from keycloak_smtp_sync.utils.watch import RetryWatcher, WatchEventType

logger = logging.getLogger(__name__)


async def watch_secrets(watcher: RetryWatcher, sync_service: SmtpSyncService) -> None:
    """
    Consume the watch until it is stopped.

    Each MODIFIED event is synced before the next event is read, so at most
    one sync is in flight at any time.

    Args:
        watcher: Reconnecting Secret watch
        sync_service: Service invoked for modified Secrets
    """
    events = iter(watcher)
    logger.info(
        f"Watching secrets in namespace {watcher.namespace}",
        extra={"namespace": watcher.namespace},
    )

    while True:
        # The watch blocks on the network; read it off the event loop
        event = await asyncio.to_thread(next, events, None)
        if event is None:
            break

        logger.debug(
            f"Event type: {event.type.value}",
            extra={
                "event_type": event.type.value,
                "resource_name": event.name,
                "resource_version": event.resource_version,
            },
        )

        if event.type is not WatchEventType.MODIFIED:
            continue

        logger.info(
            f"Secret changed: {event.name}",
            extra={"event_type": event.type.value, "resource_name": event.name},
        )
        try:
            await sync_service.handle_secret_change(event.name)
        except Exception as e:
            # Keep watching; the next modification gets another attempt
            logger.error(
                f"Unexpected error while syncing secret {event.name}: {e}",
                exc_info=True,
                extra={"resource_name": event.name, "error_type": type(e).__name__},
            )

    logger.info("Secret watch stopped", extra={"namespace": watcher.namespace})
