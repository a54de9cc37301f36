"""
Reconnecting watch over the Secrets of one namespace.

``kubernetes.watch.Watch`` streams a single connection and stops when the
server closes it. RetryWatcher wraps it so that consumers see one endless
sequence of events:

- each connection is opened with a bounded server-side timeout
- the resource version of every event (bookmarks included) is remembered and
  the next connection resumes from it
- when the remembered version has expired (410 Gone) the collection is
  listed again to obtain a fresh one
- a failed connection is reported as an ERROR event and re-opened after a
  short fixed delay
"""

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

import urllib3
from kubernetes import client, watch
from kubernetes.client.rest import ApiException

from keycloak_smtp_sync.constants import (
    HTTP_STATUS_GONE,
    WATCH_RESTART_DELAY_SECONDS,
    WATCH_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class WatchEventType(str, Enum):
    """Kinds of event delivered by the watch."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class WatchEvent:
    """One change notification for a Secret."""

    type: WatchEventType
    name: str | None = None
    resource_version: str | None = None
    object: Any = None


def _object_metadata(obj: Any) -> tuple[str | None, str | None]:
    """Return (name, resourceVersion) of a typed object or a raw dict."""
    if isinstance(obj, dict):
        metadata = obj.get("metadata") or {}
        return metadata.get("name"), metadata.get("resourceVersion")

    metadata = getattr(obj, "metadata", None)
    if metadata is None:
        return None, None
    return metadata.name, metadata.resource_version


class RetryWatcher:
    """
    Endless, resumable stream of Secret events for one namespace.

    Iterating blocks on the network; run it in a worker thread when used
    from async code.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api,
        namespace: str,
        resource_version: str | None = None,
        timeout_seconds: int = WATCH_TIMEOUT_SECONDS,
        restart_delay: float = WATCH_RESTART_DELAY_SECONDS,
        watch_factory: Callable[[], watch.Watch] = watch.Watch,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            core_api: CoreV1Api handle used to list and watch Secrets
            namespace: Namespace to watch
            resource_version: Cursor to start from; when None the current
                collection version is listed first, so existing Secrets are
                not replayed
            timeout_seconds: Server-side timeout of each watch connection
            restart_delay: Pause before reconnecting after a failure
            watch_factory: Creates the underlying Watch (one per connection)
            sleep: Sleep function used for the restart delay
        """
        self.core_api = core_api
        self.namespace = namespace
        self.timeout_seconds = timeout_seconds
        self.restart_delay = restart_delay
        self._resource_version = resource_version
        self._watch_factory = watch_factory
        self._sleep = sleep
        self._current_watch: watch.Watch | None = None
        self._stopped = False

    @property
    def resource_version(self) -> str | None:
        """Last observed resource version (the resume cursor)."""
        return self._resource_version

    def stop(self) -> None:
        """
        Stop the watch. Safe to call from another thread.

        The current connection is stopped too; Watch.stop() shuts down its
        socket, so a read blocked on a quiet stream returns immediately
        instead of waiting for the server timeout.
        """
        self._stopped = True
        if self._current_watch is not None:
            self._current_watch.stop()

    def __iter__(self) -> Iterator[WatchEvent]:
        return self.events()

    def events(self) -> Iterator[WatchEvent]:
        """Yield events forever, reconnecting as needed, until stop() is called."""
        while not self._stopped:
            failure: Exception | None = None

            try:
                if self._resource_version is None:
                    self._resource_version = self._list_resource_version()
                yield from self._stream_once()

            except ApiException as e:
                failure = e
                if e.status == HTTP_STATUS_GONE:
                    logger.info(
                        f"Watch cursor {self._resource_version} expired for "
                        f"secrets in {self.namespace}; listing again",
                        extra={"namespace": self.namespace},
                    )
                    self._resource_version = None
                else:
                    logger.warning(
                        f"Secret watch in {self.namespace} failed: "
                        f"{e.status} {e.reason}",
                        extra={"namespace": self.namespace, "http_status": e.status},
                    )

            except urllib3.exceptions.HTTPError as e:
                failure = e
                logger.warning(
                    f"Secret watch connection in {self.namespace} dropped: {e}",
                    extra={"namespace": self.namespace},
                )

            if failure is not None:
                yield WatchEvent(
                    type=WatchEventType.ERROR,
                    resource_version=self._resource_version,
                    object=failure,
                )
                if not self._stopped:
                    self._sleep(self.restart_delay)

        logger.debug(f"Secret watch in {self.namespace} stopped")

    def _list_resource_version(self) -> str:
        secrets = self.core_api.list_namespaced_secret(
            namespace=self.namespace, limit=1
        )
        resource_version = secrets.metadata.resource_version
        logger.debug(
            f"Listed secrets in {self.namespace} at resource version {resource_version}",
            extra={"namespace": self.namespace, "resource_version": resource_version},
        )
        return resource_version

    def _stream_once(self) -> Iterator[WatchEvent]:
        """Stream one watch connection until the server closes it."""
        w = self._watch_factory()
        self._current_watch = w

        logger.debug(
            f"Opening secret watch in {self.namespace} from resource version "
            f"{self._resource_version}",
            extra={
                "namespace": self.namespace,
                "resource_version": self._resource_version,
            },
        )

        try:
            for raw_event in w.stream(
                self.core_api.list_namespaced_secret,
                namespace=self.namespace,
                resource_version=self._resource_version,
                timeout_seconds=self.timeout_seconds,
                allow_watch_bookmarks=True,
                # Client read timeout a bit past the server timeout so a
                # stalled connection is dropped too
                _request_timeout=self.timeout_seconds + 5,
            ):
                event = self._to_event(raw_event)
                if event.resource_version:
                    self._resource_version = event.resource_version
                yield event

                if self._stopped:
                    return
        finally:
            w.stop()
            self._current_watch = None

    @staticmethod
    def _to_event(raw_event: dict[str, Any]) -> WatchEvent:
        obj = raw_event.get("object")
        name, resource_version = _object_metadata(obj)

        try:
            event_type = WatchEventType(raw_event.get("type"))
        except ValueError:
            logger.warning(f"Unknown watch event type: {raw_event.get('type')}")
            event_type = WatchEventType.ERROR

        return WatchEvent(
            type=event_type,
            name=name,
            resource_version=resource_version,
            object=obj,
        )
