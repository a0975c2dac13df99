"""Registry credentials and daemon login."""

from __future__ import annotations

from dataclasses import dataclass

import docker

from dockhand.config import RegistryConfig
from dockhand.logger import logger


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str
    email: str | None = None
    server_address: str | None = None  # registry URL; None = Docker Hub

    @classmethod
    def from_config(cls, config: RegistryConfig) -> Credentials | None:
        """Build credentials from the ``[registry]`` section, or None if unset."""
        if not config.username:
            return None
        return cls(
            username=config.username,
            password=config.password.get_secret_value() if config.password else "",
            email=config.email,
            server_address=config.server_address,
        )


def authenticate(client: docker.DockerClient, credentials: Credentials) -> None:
    """Log the client in so later pulls, builds and pushes carry the auth."""
    logger.debug(
        "Logging in to registry",
        registry=credentials.server_address or "default",
        username=credentials.username,
    )
    client.login(
        username=credentials.username,
        password=credentials.password,
        email=credentials.email,
        registry=credentials.server_address,
    )
