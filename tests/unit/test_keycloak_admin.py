"""
Unit tests for KeycloakAdminClient.

Requests are served by httpx.MockTransport so the exact URLs, headers and
bodies sent to Keycloak can be asserted.
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from keycloak_smtp_sync.errors import KeycloakAdminError
from keycloak_smtp_sync.utils.keycloak_admin import AdminToken, KeycloakAdminClient
from tests.fixtures.keycloak_resources import make_realm

SERVER_URL = "https://keycloak.example.com"


def make_client(handler) -> KeycloakAdminClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return KeycloakAdminClient(f"{SERVER_URL}/", http_client=http_client)


class TestAdminClientInitialization:
    """Test admin client initialization."""

    def test_strips_trailing_slash(self):
        client = KeycloakAdminClient("https://keycloak.example.com/")

        assert client.server_url == "https://keycloak.example.com"
        assert client.client_id == "admin-cli"
        assert client.timeout == 60


class TestLoginAdmin:
    """Password grant against the token endpoint."""

    @pytest.mark.asyncio
    async def test_login_success(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "access_token": "test-token",
                    "expires_in": 60,
                    "refresh_token": "refresh",
                    "token_type": "Bearer",
                    "scope": "profile email",
                },
            )

        client = make_client(handler)
        token = await client.login_admin("admin", "secret", "REV")

        assert token.access_token == "test-token"
        assert token.expires_in == 60

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/realms/REV/protocol/openid-connect/token"
        form = parse_qs(request.content.decode())
        assert form == {
            "username": ["admin"],
            "password": ["secret"],
            "grant_type": ["password"],
            "client_id": ["admin-cli"],
        }

    @pytest.mark.asyncio
    async def test_login_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_grant"})

        client = make_client(handler)

        with pytest.raises(KeycloakAdminError) as exc_info:
            await client.login_admin("admin", "wrong", "REV")

        assert exc_info.value.status_code == 401
        assert "Authentication failed" in str(exc_info.value)
        assert "invalid_grant" in exc_info.value.response_body

    @pytest.mark.asyncio
    async def test_login_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(KeycloakAdminError) as exc_info:
            await client.login_admin("admin", "admin", "REV")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_login_response_without_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        client = make_client(handler)

        with pytest.raises(KeycloakAdminError):
            await client.login_admin("admin", "admin", "REV")


class TestGetRealm:
    """Reading the realm representation."""

    @pytest.mark.asyncio
    async def test_get_realm_success(self):
        realm = make_realm()
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=realm)

        client = make_client(handler)
        result = await client.get_realm(AdminToken(access_token="tok"), "REV")

        assert result == realm
        assert requests[0].method == "GET"
        assert requests[0].url.path == "/admin/realms/REV"
        assert requests[0].headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_get_realm_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "Realm not found."})

        client = make_client(handler)

        with pytest.raises(KeycloakAdminError) as exc_info:
            await client.get_realm(AdminToken(access_token="tok"), "missing")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_get_realm_non_object_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=["not", "a", "realm"])

        client = make_client(handler)

        with pytest.raises(KeycloakAdminError):
            await client.get_realm(AdminToken(access_token="tok"), "REV")


class TestUpdateRealm:
    """Writing the realm representation back."""

    @pytest.mark.asyncio
    async def test_update_realm_sends_full_representation(self):
        realm = make_realm()
        realm["smtpServer"]["host"] = "smtp.example.org"
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(204)

        client = make_client(handler)
        await client.update_realm(AdminToken(access_token="tok"), realm)

        request = requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/admin/realms/REV"
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content) == realm

    @pytest.mark.asyncio
    async def test_update_realm_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, text="forbidden")

        client = make_client(handler)

        with pytest.raises(KeycloakAdminError) as exc_info:
            await client.update_realm(AdminToken(access_token="tok"), make_realm())

        assert exc_info.value.status_code == 403
        assert exc_info.value.body_preview() == "forbidden"

    @pytest.mark.asyncio
    async def test_update_realm_requires_name(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = make_client(handler)

        with pytest.raises(KeycloakAdminError):
            await client.update_realm(AdminToken(access_token="tok"), {"enabled": True})


class TestClose:
    @pytest.mark.asyncio
    async def test_close_closes_http_client(self):
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )
        client = KeycloakAdminClient(SERVER_URL, http_client=http_client)

        async with client:
            pass

        assert http_client.is_closed
