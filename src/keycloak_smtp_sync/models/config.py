"""Runtime configuration assembled once at startup."""

from pydantic import BaseModel, ConfigDict, Field

from keycloak_smtp_sync.settings import Settings


class RuntimeConfig(BaseModel):
    """
    Immutable configuration shared by the watch loop and the sync action.

    Combines environment settings with the namespace resolved from the
    cluster. Every field must be non-empty.
    """

    model_config = ConfigDict(frozen=True)

    keycloak_url: str = Field(..., min_length=1, description="Keycloak base URL")
    realm: str = Field(..., min_length=1, description="Target realm name")
    admin_username: str = Field(..., min_length=1, description="Admin username")
    admin_password: str = Field(
        ..., min_length=1, repr=False, description="Admin password"
    )
    namespace: str = Field(..., min_length=1, description="Watched namespace")
    secret_name: str = Field(..., min_length=1, description="Watched Secret name")

    @classmethod
    def from_settings(cls, settings: Settings, namespace: str) -> "RuntimeConfig":
        return cls(
            keycloak_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            admin_username=settings.keycloak_admin_user,
            admin_password=settings.keycloak_admin_password,
            namespace=namespace,
            secret_name=settings.smtp_secret_name,
        )
