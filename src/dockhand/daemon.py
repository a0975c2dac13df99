"""Thin adapter over the docker SDK.

Every call goes straight to the daemon; nothing is cached between calls.
"""

from __future__ import annotations

from typing import Any

import docker
from docker.errors import NotFound
from docker.models.containers import Container
from docker.models.images import Image

from dockhand.config import DockerConfig
from dockhand.logger import logger


def get_client(config: DockerConfig) -> docker.DockerClient:
    """Connect to the daemon named in *config*, or the environment's default."""
    kwargs: dict[str, Any] = {"version": config.version}
    if config.timeout is not None:
        kwargs["timeout"] = config.timeout
    if config.base_url:
        logger.debug("Connecting to Docker daemon", base_url=config.base_url)
        return docker.DockerClient(base_url=config.base_url, **kwargs)
    logger.debug("Connecting to Docker daemon from environment")
    return docker.from_env(**kwargs)


def find_container(client: docker.DockerClient, name: str) -> Container | None:
    """Look a container up by name. Only a NotFound from the daemon means absent."""
    try:
        return client.containers.get(name)
    except NotFound:
        return None


def container_status(container: Container) -> str:
    """``running``, ``exited``, ``created``… as reported by the daemon."""
    return container.attrs["State"]["Status"]


def images_by_reference(client: docker.DockerClient, reference: str) -> list[Image]:
    """Local images whose reference matches *reference* exactly."""
    return client.images.list(filters={"reference": reference})


def images_by_repository(client: docker.DockerClient, repository: str) -> list[Image]:
    """Local images belonging to *repository* (any tag)."""
    return client.images.list(name=repository)


def pull_image(client: docker.DockerClient, reference: str) -> Image:
    return client.images.pull(reference)
