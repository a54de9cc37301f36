"""Unit tests for MailCredentials, RuntimeConfig and the realm SMTP mutation."""

import base64

import pytest
from pydantic import ValidationError

from keycloak_smtp_sync.models import (
    MailCredentials,
    RuntimeConfig,
    apply_mail_credentials,
)
from tests.fixtures.keycloak_resources import (
    REALM_WITHOUT_SMTP,
    SMTP_SECRET_DATA,
    encode,
    make_realm,
)


class TestMailCredentials:
    """Decoding of Secret data."""

    def test_from_secret_data(self):
        credentials = MailCredentials.from_secret_data(SMTP_SECRET_DATA)

        assert credentials.username == "mailer"
        assert credentials.password == "s3cr3t"
        assert credentials.host == "smtp.example.org"

    def test_missing_keys_become_empty(self):
        credentials = MailCredentials.from_secret_data({"username": encode("mailer")})

        assert credentials.username == "mailer"
        assert credentials.password == ""
        assert credentials.host == ""

    def test_no_data(self):
        credentials = MailCredentials.from_secret_data(None)

        assert credentials == MailCredentials(username="", password="", host="")

    def test_invalid_utf8_replaced(self):
        data = {
            "username": "//4=",  # base64 of 0xff 0xfe
            "password": base64.b64encode(b"p\xe4ss").decode("ascii"),
        }

        credentials = MailCredentials.from_secret_data(data)

        assert credentials.username == "\ufffd\ufffd"
        assert credentials.password == "p\ufffdss"

    def test_password_not_in_repr(self):
        credentials = MailCredentials(username="u", password="p4ss", host="h")

        assert "p4ss" not in repr(credentials)


class TestApplyMailCredentials:
    """Realm SMTP map mutation."""

    def test_overwrites_only_credentials(self):
        realm = make_realm()
        credentials = MailCredentials(username="u", password="p", host="h")

        result = apply_mail_credentials(realm, credentials)

        assert result is realm
        assert realm["smtpServer"] == {
            "host": "h",
            "user": "u",
            "password": "p",
            "port": "587",
        }
        assert realm["displayName"] == "Revision"

    def test_creates_smtp_map_when_missing(self):
        realm = make_realm(REALM_WITHOUT_SMTP)

        apply_mail_credentials(realm, MailCredentials(username="u", host="h"))

        assert realm["smtpServer"] == {"host": "h", "user": "u", "password": ""}


class TestRuntimeConfig:
    """Validation of the startup configuration record."""

    def _values(self, **overrides):
        values = {
            "keycloak_url": "https://keycloak.example.com",
            "realm": "REV",
            "admin_username": "admin",
            "admin_password": "admin-secret",
            "namespace": "default",
            "secret_name": "keycloak-smtp-secret",
        }
        values.update(overrides)
        return values

    @pytest.mark.parametrize(
        "field",
        ["keycloak_url", "realm", "admin_username", "admin_password", "namespace", "secret_name"],
    )
    def test_empty_field_rejected(self, field):
        with pytest.raises(ValidationError) as exc_info:
            RuntimeConfig(**self._values(**{field: ""}))

        assert field in str(exc_info.value)

    def test_frozen(self):
        config = RuntimeConfig(**self._values())

        with pytest.raises(ValidationError):
            config.realm = "other"

    def test_password_not_in_repr(self):
        config = RuntimeConfig(**self._values())

        assert "admin-secret" not in repr(config)
