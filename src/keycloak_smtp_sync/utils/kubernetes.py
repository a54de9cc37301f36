"""
Kubernetes utilities for the SMTP sync process.

This module provides helper functions for interacting with the Kubernetes API:
- Kubernetes client construction (in-cluster or kubeconfig)
- Resolution of the namespace to watch
- Reading the watched Secret
"""

import logging

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from keycloak_smtp_sync.constants import DEFAULT_NAMESPACE
from keycloak_smtp_sync.errors import ConfigurationError, KubernetesAPIError

logger = logging.getLogger(__name__)


def get_kubernetes_client(kubeconfig: str | None = None) -> client.ApiClient:
    """
    Build a Kubernetes API client.

    Args:
        kubeconfig: Path to a kubeconfig file. When unset, in-cluster
            service account credentials are used.

    Returns:
        Configured Kubernetes API client

    Raises:
        ConfigurationError: If no usable credentials are found
    """
    try:
        if kubeconfig:
            api_client = config.new_client_from_config(config_file=kubeconfig)
            logger.debug(f"Loaded kubeconfig from {kubeconfig}")
            return api_client

        configuration = client.Configuration()
        config.load_incluster_config(client_configuration=configuration)
        logger.debug("Loaded in-cluster Kubernetes configuration")
        return client.ApiClient(configuration)

    except config.ConfigException as e:
        raise ConfigurationError(
            f"Failed to load Kubernetes configuration: {e}",
            user_action="Run inside a cluster or point KUBECONFIG at a kubeconfig file",
            cause=e,
        ) from e


def resolve_namespace(
    core_api: client.CoreV1Api, name: str = DEFAULT_NAMESPACE
) -> str:
    """
    Resolve the namespace to watch by reading the Namespace object.

    Args:
        core_api: CoreV1Api handle
        name: Namespace object to look up

    Returns:
        The namespace's name as reported by the API server

    Raises:
        KubernetesAPIError: If the namespace cannot be read
    """
    try:
        namespace = core_api.read_namespace(name=name)
    except ApiException as e:
        raise KubernetesAPIError(
            f"Failed to get namespace '{name}'",
            status=e.status,
            reason=e.reason,
            cause=e,
        ) from e
    except urllib3.exceptions.HTTPError as e:
        raise KubernetesAPIError(
            f"Failed to get namespace '{name}': {e}", cause=e
        ) from e

    return namespace.metadata.name


def read_secret(
    core_api: client.CoreV1Api, name: str, namespace: str
) -> client.V1Secret:
    """
    Read a Secret by name.

    Args:
        core_api: CoreV1Api handle
        name: Secret name
        namespace: Secret namespace

    Returns:
        The Secret object (data values still base64 encoded)

    Raises:
        KubernetesAPIError: If the Secret cannot be read
    """
    try:
        return core_api.read_namespaced_secret(name=name, namespace=namespace)
    except ApiException as e:
        if e.status == 404:
            message = f"Secret {namespace}/{name} not found"
        else:
            message = f"Failed to get secret {namespace}/{name}"
        raise KubernetesAPIError(
            message, status=e.status, reason=e.reason, cause=e
        ) from e
    except urllib3.exceptions.HTTPError as e:
        raise KubernetesAPIError(
            f"Failed to get secret {namespace}/{name}: {e}", cause=e
        ) from e
