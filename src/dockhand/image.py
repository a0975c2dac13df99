"""Build, tag and push images.

Build and push responses are streamed chunk by chunk through
:func:`dockhand.output.emit`, so progress is printed as it arrives and the
first error line from the daemon aborts the operation with
:class:`~dockhand.errors.StreamError`.

Two different identity keys are used on purpose: the build is tagged with
the *repository name*, tagging looks images up by that repository name, and
pushing looks them up by the *repository URL* the tags point at.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

import docker

from dockhand.auth import Credentials, authenticate
from dockhand.daemon import images_by_repository
from dockhand.errors import ConfigurationError, ImageNotFoundError
from dockhand.logger import logger
from dockhand.output import emit_stream
from dockhand.values import Deferred, resolve


@dataclass
class ImageTarget:
    """Everything needed to build, tag and push one image.

    ``repository_url``, ``tags`` and ``credentials`` may be plain values or
    :class:`~dockhand.values.Fixed` / :class:`~dockhand.values.Resolver`
    values; resolvers receive this target.
    """

    image_name: str
    repository_name: str
    repository_url: str | Deferred[str] | None = None
    tags: Sequence[str] | Deferred[Sequence[str]] = field(default_factory=list)
    work_directory: str | Path = "build"
    build_args: Mapping[str, str] | None = None
    platform: str | None = None
    credentials: Credentials | Deferred[Credentials] | None = None

    @property
    def build_directory(self) -> Path:
        return Path(self.work_directory) / self.image_name

    def resolved_repository_url(self) -> str:
        url = resolve(self.repository_url, self)
        if not url:
            raise ConfigurationError(f"Repository URL is required for {self.image_name}")
        return url

    def resolved_tags(self) -> list[str]:
        tags = list(resolve(self.tags, self) or [])
        if not tags:
            raise ConfigurationError(f"At least one tag is required for {self.image_name}")
        return tags

    def resolved_credentials(self) -> Credentials | None:
        return resolve(self.credentials, self)

    def require(self, *names: str) -> None:
        missing = [n for n in names if not getattr(self, n)]
        if missing:
            raise ConfigurationError(f"Missing required image settings: {', '.join(missing)}")


def _login(client: docker.DockerClient, target: ImageTarget) -> None:
    credentials = target.resolved_credentials()
    if credentials is not None:
        authenticate(client, credentials)


def build(client: docker.DockerClient, target: ImageTarget, out: TextIO | None = None) -> None:
    """Build ``<work_directory>/<image_name>`` tagged with the repository name."""
    target.require("image_name", "repository_name", "work_directory")
    _login(client, target)

    options: dict[str, Any] = {"tag": target.repository_name}
    if target.build_args:
        options["buildargs"] = dict(target.build_args)
    if target.platform:
        options["platform"] = target.platform

    logger.info("Building image", path=str(target.build_directory), tag=target.repository_name)
    stream = client.api.build(
        path=str(target.build_directory),
        rm=True,
        decode=False,
        **options,
    )
    emit_stream(stream, out)


def tag(client: docker.DockerClient, target: ImageTarget) -> None:
    """Tag the locally built image as ``<repository_url>:<tag>`` for each tag."""
    target.require("image_name", "repository_name")
    repository_url = target.resolved_repository_url()
    tags = target.resolved_tags()

    images = images_by_repository(client, target.repository_name)
    if not images:
        raise ImageNotFoundError(f"No image found with name: '{target.repository_name}'")

    image = images[0]
    for t in tags:
        logger.info("Tagging image", image=image.short_id, repository=repository_url, tag=t)
        image.tag(repository_url, tag=t, force=True)


def push(client: docker.DockerClient, target: ImageTarget, out: TextIO | None = None) -> None:
    """Push every tag of the repository URL. The first stream error aborts."""
    target.require("image_name")
    repository_url = target.resolved_repository_url()
    tags = target.resolved_tags()
    _login(client, target)

    images = images_by_repository(client, repository_url)
    if not images:
        raise ImageNotFoundError(f"No image found for repository: '{repository_url}'")

    for t in tags:
        logger.info("Pushing image", repository=repository_url, tag=t)
        stream = client.api.push(repository_url, tag=t, stream=True, decode=False)
        emit_stream(stream, out)


def publish(client: docker.DockerClient, target: ImageTarget, out: TextIO | None = None) -> None:
    """Build, tag and push in that order, stopping at the first failure."""
    build(client, target, out)
    tag(client, target)
    push(client, target, out)
