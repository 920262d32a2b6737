"""
Shared configuration management for the Academy for Excellence backend.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias="ACCESS_ENV")
    log_level: str = Field(default="info", validation_alias="ACCESS_LOG_LEVEL")

    # Token cache (unset disables caching)
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")

    # CORS allow-list, comma separated (unset disables CORS handling)
    cors_allowed_origins: Optional[str] = Field(default=None, validation_alias="CORS_ALLOWED_ORIGINS")

    @property
    def cors_origins(self) -> Optional[List[str]]:
        """Parsed CORS allow-list, or None when CORS is not enforced."""
        if self.cors_allowed_origins is None:
            return None
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def cache_enabled(self) -> bool:
        return bool(self.redis_url and self.redis_url.strip())


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = Field(default=5000, validation_alias="PORT")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")


class ProxyConfig(ServiceConfig):
    """Business Central proxy settings."""

    # Upstream URL parts
    base_url: str = Field(default="", validation_alias="BC_BASE_URL")
    tenant_id: str = Field(default="", validation_alias="BC_TENANT_ID")
    environment: str = Field(default="", validation_alias="BC_ENVIRONMENT")
    api_version: str = Field(default="", validation_alias="BC_API_VERSION")
    company_id: str = Field(default="", validation_alias="BC_COMPANY_ID")
    api_publisher: str = Field(default="alletec", validation_alias="BC_API_PUBLISHER")
    api_group: str = Field(default="learning", validation_alias="BC_API_GROUP")

    # Client-credential grant
    client_id: str = Field(default="", validation_alias="BC_CLIENT_ID")
    client_secret: str = Field(default="", validation_alias="BC_CLIENT_SECRET")
    authority_tenant_id: Optional[str] = Field(default=None, validation_alias="BC_AUTHORITY_TENANT_ID")
    authority_host: str = Field(default="https://login.microsoftonline.com", validation_alias="BC_AUTHORITY_HOST")
    scope: str = Field(default="https://api.businesscentral.dynamics.com/.default", validation_alias="BC_SCOPE")

    # Relay behaviour
    request_timeout: float = Field(default=30.0, validation_alias="BC_REQUEST_TIMEOUT")
    flatten_success_status: bool = Field(default=False, validation_alias="BC_FLATTEN_SUCCESS_STATUS")

    @property
    def authority_tenant(self) -> str:
        return (self.authority_tenant_id or self.tenant_id).strip()


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)


def get_proxy_config(**overrides) -> ProxyConfig:
    """Get configuration for the Business Central proxy."""
    return ProxyConfig(service_name="proxy", **overrides)
