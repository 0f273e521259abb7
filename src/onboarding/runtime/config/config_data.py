"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(default=["GET", "POST", "OPTIONS"])
    allow_headers: list[str] = Field(default=["*"])


class AppConfig(BaseModel):
    """Application-level settings."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Deployment environment"
    )
    host: str = Field(default="0.0.0.0", description="Bind address for the API")
    port: int = Field(default=8000, description="Bind port for the API")
    cors: CORSConfig = Field(default_factory=CORSConfig)


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class IdentityProviderConfig(BaseModel):
    """Identity provider (Keycloak realm) configuration."""

    backend: Literal["keycloak", "memory"] = Field(
        default="keycloak", description="Identity provider implementation to use"
    )
    base_url: str = Field(
        default="http://localhost:8080", description="Keycloak server base URL"
    )
    realm: str = Field(default="", description="Realm (user pool) holding identities")
    client_id: str = Field(
        default="", description="Client used for password logins against the realm"
    )
    client_secret: str = Field(
        default="", description="Secret of the login client, if it is confidential"
    )
    admin_client_id: str = Field(
        default="", description="Service-account client used for admin operations"
    )
    admin_client_secret: str = Field(
        default="", description="Secret of the service-account client"
    )
    natural_key_attribute: str = Field(
        default="natural_key",
        description="Identity attribute holding the caller's natural key",
    )
    link_attribute: str = Field(
        default="resource_id",
        description="Identity attribute holding the linked resource identifier",
    )
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ResourceServiceConfig(BaseModel):
    """External resource (client record) service configuration."""

    backend: Literal["http", "memory"] = Field(
        default="http", description="Resource service implementation to use"
    )
    base_url: str = Field(default="", description="Resource service base URL")
    resources_path: str = Field(
        default="/resources", description="Collection path for resource records"
    )
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class TokenConfig(BaseModel):
    """Bearer token issuance settings."""

    signing_secret: str = Field(default="", description="HS256 signing secret")
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="Symmetric signing algorithm"
    )
    ttl_seconds: int = Field(
        default=3600, gt=0, description="Lifetime of issued tokens in seconds"
    )
    clock_skew: int = Field(
        default=0, ge=0, description="Clock skew tolerance in seconds"
    )


class AuthConfig(BaseModel):
    """Authentication entry point policy."""

    allow_trusted_callers: bool = Field(
        default=True,
        description="Allow token issuance from a natural key without a secret",
    )


class ConfigData(BaseModel):
    """Root configuration object, built once at process start."""

    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    identity_provider: IdentityProviderConfig = Field(
        default_factory=IdentityProviderConfig
    )
    resource_service: ResourceServiceConfig = Field(
        default_factory=ResourceServiceConfig
    )
    token: TokenConfig = Field(default_factory=TokenConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    def missing_required(self) -> list[str]:
        """Return dotted names of required settings that are empty."""
        missing = []
        if not self.token.signing_secret:
            missing.append("token.signing_secret")

        idp = self.identity_provider
        if idp.backend == "keycloak":
            for name in ("base_url", "realm", "client_id", "admin_client_id"):
                if not getattr(idp, name):
                    missing.append(f"identity_provider.{name}")

        if self.resource_service.backend == "http" and not self.resource_service.base_url:
            missing.append("resource_service.base_url")

        return missing
