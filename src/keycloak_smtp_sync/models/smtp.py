"""
SMTP credential model and the realm mutation that applies it.

The watched Secret carries ``username``, ``password`` and ``hostname``. These
map onto the ``user``, ``password`` and ``host`` keys of a realm's
``smtpServer`` map; every other SMTP key (port, auth, ssl, from, ...) is left
as Keycloak returned it.
"""

import base64
from typing import Any

from pydantic import BaseModel, Field

from keycloak_smtp_sync.constants import (
    REALM_SMTP_FIELD,
    SECRET_HOSTNAME_KEY,
    SECRET_PASSWORD_KEY,
    SECRET_USERNAME_KEY,
    SMTP_HOST_KEY,
    SMTP_PASSWORD_KEY,
    SMTP_USER_KEY,
)


def _decode(data: dict[str, str], key: str) -> str:
    value = data.get(key)
    if not value:
        return ""
    # Bytes that are not valid UTF-8 become U+FFFD
    return base64.b64decode(value).decode("utf-8", errors="replace")


class MailCredentials(BaseModel):
    """SMTP credentials read from the watched Secret."""

    username: str = Field(default="", description="SMTP username")
    password: str = Field(default="", repr=False, description="SMTP password")
    host: str = Field(default="", description="SMTP server host")

    @classmethod
    def from_secret_data(cls, data: dict[str, str] | None) -> "MailCredentials":
        """
        Build credentials from a Secret's base64-encoded data map.

        Missing keys become empty strings and invalid UTF-8 is replaced, so
        this never fails on API server data.

        Args:
            data: The ``data`` field of a V1Secret (may be None)

        Returns:
            Decoded MailCredentials
        """
        data = data or {}
        return cls(
            username=_decode(data, SECRET_USERNAME_KEY),
            password=_decode(data, SECRET_PASSWORD_KEY),
            host=_decode(data, SECRET_HOSTNAME_KEY),
        )


def apply_mail_credentials(
    realm: dict[str, Any], credentials: MailCredentials
) -> dict[str, Any]:
    """
    Overwrite host, user and password in the realm's SMTP map in place.

    Args:
        realm: Realm representation as returned by the admin API
        credentials: Values to write

    Returns:
        The same realm dict, for chaining
    """
    smtp = realm.get(REALM_SMTP_FIELD)
    if smtp is None:
        smtp = {}
        realm[REALM_SMTP_FIELD] = smtp

    smtp[SMTP_HOST_KEY] = credentials.host
    smtp[SMTP_PASSWORD_KEY] = credentials.password
    smtp[SMTP_USER_KEY] = credentials.username
    return realm
