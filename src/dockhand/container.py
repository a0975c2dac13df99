"""Idempotent container provisioning and destruction.

:class:`Provisioner` brings a named container to "running": it reuses an
existing container (starting it if stopped) or pulls the image if needed,
creates the container and starts it. :class:`Destroyer` brings a named
container to "absent": it stops, waits for and removes it if it exists.

Both machines re-read daemon state before every decision and hold none of
their own. Two runs against the same container name at the same time are
not coordinated with each other; callers that need that must serialize
them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import docker
from docker.models.containers import Container

from dockhand.daemon import container_status, find_container, images_by_reference, pull_image
from dockhand.errors import ConfigurationError, ContainerNotReadyError
from dockhand.logger import logger
from dockhand.reporter import NullReporter, Reporter

ReadyCheck = Callable[[Container], Any]


class ContainerState(Enum):
    ABSENT = "absent"
    EXISTS_RUNNING = "exists_running"
    EXISTS_STOPPED = "exists_stopped"
    DONE = "done"


@dataclass
class ContainerSpec:
    """Desired configuration of a provisioned container."""

    name: str
    image: str
    ports: list[str] = field(default_factory=list)  # "hostPort:containerPort"
    environment: dict[str, str] = field(default_factory=dict)
    command: list[str] | None = None
    ready: ReadyCheck | None = None  # called once after start with the container

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Container name is required")
        if not self.image:
            raise ConfigurationError(f"Image is required to provision {self.name}")
        process_ports(self.ports)  # reject malformed mappings before touching the daemon


def process_ports(
    ports: Iterable[str],
) -> tuple[dict[str, dict], dict[str, list[dict[str, str]]]]:
    """Translate ``"H:C"`` pairs into exposed ports and port bindings.

    >>> process_ports(["8080:80"])
    ({'80/tcp': {}}, {'80/tcp': [{'HostPort': '8080'}]})
    """
    exposed_ports: dict[str, dict] = {}
    port_bindings: dict[str, list[dict[str, str]]] = {}
    for mapping in ports:
        parts = mapping.split(":")
        if len(parts) != 2 or not all(parts):
            raise ConfigurationError(
                f"Invalid port mapping {mapping!r}, expected hostPort:containerPort"
            )
        host_port, container_port = parts
        key = f"{container_port}/tcp"
        exposed_ports[key] = {}
        port_bindings[key] = [{"HostPort": host_port}]
    return exposed_ports, port_bindings


def make_container_config(
    image: str,
    ports: Sequence[str],
    environment: Mapping[str, str],
    command: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Engine API create-container body."""
    exposed_ports, port_bindings = process_ports(ports)
    config: dict[str, Any] = {
        "Image": image,
        "ExposedPorts": exposed_ports,
        "HostConfig": {"PortBindings": port_bindings},
        "Env": [f"{key}={value}" for key, value in environment.items()],
    }
    if command is not None:
        config["Cmd"] = list(command)
    return config


class Provisioner:
    """Ensure a container matching *spec* exists and is running."""

    def __init__(
        self,
        client: docker.DockerClient,
        spec: ContainerSpec,
        reporter: Reporter | None = None,
    ) -> None:
        self.client = client
        self.spec = spec
        self.reporter = reporter or NullReporter()

    def execute(self) -> Container:
        """Run the state machine. Returns the running container."""
        spec = self.spec
        log = logger.bind(container=spec.name)

        self.reporter.checking_if_container_exists(spec.name)
        container = find_container(self.client, spec.name)
        if container is None:
            self.reporter.container_does_not_exist(spec.name)
            state = ContainerState.ABSENT
        else:
            self.reporter.container_exists(container)
            self.reporter.checking_if_container_running(container)
            container.reload()
            if container_status(container) == "running":
                self.reporter.container_running(container)
                state = ContainerState.EXISTS_RUNNING
            else:
                self.reporter.container_not_running(container)
                state = ContainerState.EXISTS_STOPPED
        log.debug("Observed container state", state=state.value)

        match state:
            case ContainerState.ABSENT:
                self._ensure_image_available(spec.image)
                container = self._start(self._create())
            case ContainerState.EXISTS_STOPPED:
                container = self._start(container)
            case ContainerState.EXISTS_RUNNING:
                pass

        self.reporter.done()
        log.debug("Provisioned container", state=ContainerState.DONE.value)
        return container

    def _ensure_image_available(self, image: str) -> None:
        self.reporter.checking_if_image_available(image)
        if images_by_reference(self.client, image):
            self.reporter.image_available(image)
            return
        self.reporter.image_not_available(image)
        self.reporter.pulling_image(image)
        logger.info("Pulling image", image=image)
        pull_image(self.client, image)
        self.reporter.image_pulled(image)

    def _create(self) -> Container:
        spec = self.spec
        config = make_container_config(spec.image, spec.ports, spec.environment, spec.command)
        self.reporter.creating_container(spec.name, spec.image)
        created = self.client.api.create_container_from_config(config, spec.name)
        for warning in created.get("Warnings") or []:
            logger.warning("Daemon warning on create", container=spec.name, warning=warning)
        container = self.client.containers.get(created["Id"])
        self.reporter.container_created(container)
        return container

    def _start(self, container: Container) -> Container:
        self.reporter.starting_container(container)
        container.start()
        self.reporter.container_started(container)
        if self.spec.ready is not None:
            self.reporter.waiting_for_container_to_be_ready(container)
            if self.spec.ready(container) is False:
                raise ContainerNotReadyError(f"Container {self.spec.name} did not become ready")
            self.reporter.container_ready(container)
        return container


class Destroyer:
    """Ensure no container named *name* exists."""

    def __init__(
        self,
        client: docker.DockerClient,
        name: str,
        reporter: Reporter | None = None,
    ) -> None:
        if not name:
            raise ConfigurationError("Container name is required")
        self.client = client
        self.name = name
        self.reporter = reporter or NullReporter()

    def execute(self) -> None:
        self.reporter.checking_if_container_exists(self.name)
        container = find_container(self.client, self.name)
        if container is None:
            self.reporter.container_does_not_exist(self.name)
        else:
            self.reporter.container_exists(container)
            self._destroy(container)
        self.reporter.done()

    def _destroy(self, container: Container) -> None:
        self.reporter.stopping_container(container)
        container.stop()
        container.wait()
        self.reporter.container_stopped(container)
        self.reporter.deleting_container(container)
        container.remove()
        self.reporter.container_deleted(container)
        logger.info("Destroyed container", container=self.name)


def provision(
    client: docker.DockerClient,
    spec: ContainerSpec,
    reporter: Reporter | None = None,
) -> Container:
    return Provisioner(client, spec, reporter).execute()


def destroy(client: docker.DockerClient, name: str, reporter: Reporter | None = None) -> None:
    Destroyer(client, name, reporter).execute()
