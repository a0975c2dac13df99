"""Centralized configuration: Pydantic BaseSettings with TOML + dotenv sources.

Non-secret settings live in dockhand.toml. Secrets (registry password) live
in .env. Environment variables override both, using the ``DOCKHAND_`` prefix
and ``__`` as the nested delimiter (e.g. ``DOCKHAND_DOCKER__BASE_URL``).
Secrets use SecretStr for masking in logs.

Priority (highest wins): init args > env vars > .env > dockhand.toml

Usage::

    from dockhand.config import get_settings

    s = get_settings()
    print(s.docker.base_url)
    print(s.image.work_directory)
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

# ---------------------------------------------------------------------------
# Sub-models (each maps to a [section] in dockhand.toml)
# ---------------------------------------------------------------------------


class _StrictModel(BaseModel):
    """Base for all config sub-models. Unknown keys are rejected."""

    model_config = {"extra": "forbid"}


class DockerConfig(_StrictModel):
    base_url: str | None = None  # None = DOCKER_HOST / local socket via docker.from_env()
    version: str = "auto"  # engine API version
    timeout: int | None = None  # seconds; None = docker SDK default

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v


class LoggingConfig(_StrictModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()


class RegistryConfig(_StrictModel):
    """Static registry credentials. Leave username unset to skip login."""

    username: str | None = None
    password: SecretStr | None = None
    email: str | None = None
    server_address: str | None = None


class ImageConfig(_StrictModel):
    work_directory: str = "build"  # build context is <work_directory>/<image_name>
    platform: str | None = None  # e.g. "linux/amd64"


# ---------------------------------------------------------------------------
# Root Settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        toml_file="dockhand.toml",
        env_file=".env",
        env_prefix="DOCKHAND_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    docker: DockerConfig = DockerConfig()
    logging: LoggingConfig = LoggingConfig()
    registry: RegistryConfig = RegistryConfig()
    image: ImageConfig = ImageConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init > env vars > .env > dockhand.toml > file secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def work_directory(self) -> Path:
        return Path(self.image.work_directory)


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_settings: Settings | None = None


def get_settings() -> Settings:
    """Lazy cached singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Clear the cached singleton (for tests)."""
    global _settings
    _settings = None
