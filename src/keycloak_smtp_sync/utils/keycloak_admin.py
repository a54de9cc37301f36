"""
Keycloak Admin API client utilities.

This module provides the small slice of the Keycloak Admin REST API that the
SMTP sync needs:
- Password-grant login of an admin user
- Reading a realm representation
- Writing a realm representation back

Tokens are returned to the caller and passed explicitly to each call; the
client keeps no authentication state of its own.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field

from keycloak_smtp_sync.constants import (
    ADMIN_CLIENT_ID,
    KEYCLOAK_REQUEST_TIMEOUT_SECONDS,
)
from keycloak_smtp_sync.errors import KeycloakAdminError

logger = logging.getLogger(__name__)


class AdminToken(BaseModel):
    """Token response of the OpenID Connect token endpoint."""

    access_token: str = Field(..., repr=False)
    expires_in: int = 300
    refresh_token: str | None = Field(default=None, repr=False)
    token_type: str = "Bearer"


class KeycloakAdminClient:
    """
    Client for the Keycloak Admin API operations used by the sync.

    A single instance is created at startup and shared by every sync action.
    """

    def __init__(
        self,
        server_url: str,
        client_id: str = ADMIN_CLIENT_ID,
        timeout: int = KEYCLOAK_REQUEST_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize Keycloak Admin client.

        Args:
            server_url: Base URL of the Keycloak server
            client_id: Client ID used for the admin password grant
            timeout: Request timeout in seconds
            http_client: Optional preconfigured httpx client
        """
        self.server_url = server_url.rstrip("/")
        self.client_id = client_id
        self.timeout = timeout
        self._client = http_client

        logger.info(f"Initialized Keycloak Admin client for {self.server_url}")

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
                follow_redirects=False,
            )
            logger.debug(f"Created httpx client for {self.server_url}")
        return self._client

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "KeycloakAdminClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def login_admin(self, username: str, password: str, realm: str) -> AdminToken:
        """
        Obtain an admin access token with the password grant.

        Args:
            username: Admin username
            password: Admin password
            realm: Realm the admin user belongs to

        Returns:
            AdminToken holding the access token

        Raises:
            KeycloakAdminError: If the token request fails
        """
        token_url = (
            f"{self.server_url}/realms/{quote(realm, safe='')}"
            "/protocol/openid-connect/token"
        )

        auth_data = {
            "username": username,
            "password": password,
            "grant_type": "password",
            "client_id": self.client_id,
        }

        try:
            client = self._get_client()
            response = await client.post(
                token_url,
                data=auth_data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
            token = AdminToken.model_validate(response.json())

        except httpx.HTTPStatusError as e:
            raise KeycloakAdminError(
                f"Authentication failed: {e}",
                status_code=e.response.status_code,
                response_body=e.response.text,
                cause=e,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise KeycloakAdminError(f"Authentication failed: {e}", cause=e) from e

        logger.debug(f"Authenticated with Keycloak realm {realm} as {username}")
        return token

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        token: AdminToken,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Make an authenticated request to the Keycloak Admin API.

        Args:
            method: HTTP method (GET, PUT)
            endpoint: API endpoint (relative to admin base)
            token: Admin token from login_admin
            json: JSON request body

        Returns:
            Response object with body already buffered

        Raises:
            KeycloakAdminError: On transport errors or non-2xx responses
        """
        url = f"{self.server_url}/admin/{endpoint.lstrip('/')}"
        headers = {"Authorization": f"{token.token_type} {token.access_token}"}

        try:
            client = self._get_client()
            response = await client.request(method, url, json=json, headers=headers)
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            response_body = e.response.text or "<no content>"

            error = KeycloakAdminError(
                f"API request failed: {method} {url}",
                status_code=status_code,
                response_body=response_body,
                cause=e,
            )
            logger.debug(
                f"Request failed: {method} {url} - {e}",
                extra={
                    "http_status": status_code,
                    "response_body": error.body_preview(),
                },
            )
            raise error from e

        except httpx.HTTPError as e:
            # Connection, timeout, protocol errors
            logger.debug(f"Request failed: {method} {url} - {e}")
            raise KeycloakAdminError(
                f"API request failed: {method} {url}: {e}", cause=e
            ) from e

    async def get_realm(self, token: AdminToken, realm_name: str) -> dict[str, Any]:
        """
        Get the full realm representation.

        The representation is returned as raw JSON so that writing it back
        preserves every field Keycloak knows about.

        Args:
            token: Admin token
            realm_name: Name of the realm to retrieve

        Returns:
            Realm representation

        Raises:
            KeycloakAdminError: If the request fails or returns no JSON object
        """
        response = await self._make_request(
            "GET", f"realms/{quote(realm_name, safe='')}", token
        )

        try:
            realm = response.json()
        except ValueError as e:
            raise KeycloakAdminError(
                f"Realm '{realm_name}' response is not valid JSON",
                status_code=response.status_code,
                cause=e,
            ) from e

        if not isinstance(realm, dict):
            raise KeycloakAdminError(
                f"Realm '{realm_name}' response is not a JSON object",
                status_code=response.status_code,
            )

        return realm

    async def update_realm(self, token: AdminToken, realm: dict[str, Any]) -> None:
        """
        Replace a realm's configuration with the given representation.

        The target realm is taken from the representation's ``realm`` field.

        Args:
            token: Admin token
            realm: Complete realm representation

        Raises:
            KeycloakAdminError: If the representation has no name or the update fails
        """
        realm_name = realm.get("realm")
        if not realm_name:
            raise KeycloakAdminError("Realm representation has no 'realm' name")

        logger.debug(f"Updating realm: {realm_name}")
        await self._make_request(
            "PUT", f"realms/{quote(realm_name, safe='')}", token, json=realm
        )
