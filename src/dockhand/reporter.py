"""Lifecycle notifications emitted by the container state machines.

The vocabulary is closed: :class:`ReporterEvent` lists every event, and
:class:`Reporter` has one method per event. Each method forwards to
:meth:`Reporter.report`, which does nothing by default, so a subclass can
either override individual methods (as :class:`PrintingReporter` does) or
handle every event in one place (as :class:`LoggingReporter` does).

Reporters only observe. Their return values are ignored and they never
change the control flow of provisioning or destruction.
"""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import Any, TextIO

from dockhand.logger import logger


class ReporterEvent(StrEnum):
    CHECKING_IF_CONTAINER_EXISTS = "checking_if_container_exists"
    CONTAINER_EXISTS = "container_exists"
    CONTAINER_DOES_NOT_EXIST = "container_does_not_exist"
    CHECKING_IF_IMAGE_AVAILABLE = "checking_if_image_available"
    IMAGE_AVAILABLE = "image_available"
    IMAGE_NOT_AVAILABLE = "image_not_available"
    PULLING_IMAGE = "pulling_image"
    IMAGE_PULLED = "image_pulled"
    CREATING_CONTAINER = "creating_container"
    CONTAINER_CREATED = "container_created"
    CHECKING_IF_CONTAINER_RUNNING = "checking_if_container_running"
    CONTAINER_RUNNING = "container_running"
    CONTAINER_NOT_RUNNING = "container_not_running"
    STARTING_CONTAINER = "starting_container"
    CONTAINER_STARTED = "container_started"
    WAITING_FOR_CONTAINER_TO_BE_READY = "waiting_for_container_to_be_ready"
    CONTAINER_READY = "container_ready"
    STOPPING_CONTAINER = "stopping_container"
    CONTAINER_STOPPED = "container_stopped"
    DELETING_CONTAINER = "deleting_container"
    CONTAINER_DELETED = "container_deleted"
    DONE = "done"


class Reporter:
    """Base reporter: every event is accepted and discarded."""

    def report(self, event: ReporterEvent, *args: Any) -> None:
        """Catch-all hook. Called by every event method not overridden."""

    def checking_if_container_exists(self, name: str) -> None:
        self.report(ReporterEvent.CHECKING_IF_CONTAINER_EXISTS, name)

    def container_exists(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_EXISTS, container)

    def container_does_not_exist(self, name: str) -> None:
        self.report(ReporterEvent.CONTAINER_DOES_NOT_EXIST, name)

    def checking_if_image_available(self, image: str) -> None:
        self.report(ReporterEvent.CHECKING_IF_IMAGE_AVAILABLE, image)

    def image_available(self, image: str) -> None:
        self.report(ReporterEvent.IMAGE_AVAILABLE, image)

    def image_not_available(self, image: str) -> None:
        self.report(ReporterEvent.IMAGE_NOT_AVAILABLE, image)

    def pulling_image(self, image: str) -> None:
        self.report(ReporterEvent.PULLING_IMAGE, image)

    def image_pulled(self, image: str) -> None:
        self.report(ReporterEvent.IMAGE_PULLED, image)

    def creating_container(self, name: str, image: str) -> None:
        self.report(ReporterEvent.CREATING_CONTAINER, name, image)

    def container_created(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_CREATED, container)

    def checking_if_container_running(self, container: Any) -> None:
        self.report(ReporterEvent.CHECKING_IF_CONTAINER_RUNNING, container)

    def container_running(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_RUNNING, container)

    def container_not_running(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_NOT_RUNNING, container)

    def starting_container(self, container: Any) -> None:
        self.report(ReporterEvent.STARTING_CONTAINER, container)

    def container_started(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_STARTED, container)

    def waiting_for_container_to_be_ready(self, container: Any) -> None:
        self.report(ReporterEvent.WAITING_FOR_CONTAINER_TO_BE_READY, container)

    def container_ready(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_READY, container)

    def stopping_container(self, container: Any) -> None:
        self.report(ReporterEvent.STOPPING_CONTAINER, container)

    def container_stopped(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_STOPPED, container)

    def deleting_container(self, container: Any) -> None:
        self.report(ReporterEvent.DELETING_CONTAINER, container)

    def container_deleted(self, container: Any) -> None:
        self.report(ReporterEvent.CONTAINER_DELETED, container)

    def done(self) -> None:
        self.report(ReporterEvent.DONE)


class NullReporter(Reporter):
    """Discards every event. The default for library callers."""


class PrintingReporter(Reporter):
    """Human-readable progress on stdout.

    Some events end the line and some leave it open for the next event, so
    a run reads as e.g. ``web exists. Checking to see if it is running...``.
    """

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _line(self, text: str) -> None:
        self.out.write(f"{text}\n")
        self.out.flush()

    def _partial(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def checking_if_container_exists(self, name: str) -> None:
        self._line(f"Checking to see if {name} exists...")

    def container_exists(self, container: Any) -> None:
        self._partial(f"{container.name} exists. ")

    def container_does_not_exist(self, name: str) -> None:
        self._line(f"{name} does not exist. Continuing.")

    def checking_if_image_available(self, image: str) -> None:
        self._line(f"Checking if image {image} is available locally...")

    def image_available(self, image: str) -> None:
        self._line(f"Image {image} available. Continuing.")

    def image_not_available(self, image: str) -> None:
        self._partial(f"Image {image} not found. ")

    def pulling_image(self, image: str) -> None:
        self._line("Pulling.")

    def image_pulled(self, image: str) -> None:
        self._line(f"Image {image} pulled. Continuing.")

    def creating_container(self, name: str, image: str) -> None:
        self._line(f"Creating {name} container from image {image}...")

    def container_created(self, container: Any) -> None:
        self._partial(f"{container.name} created with ID: {container.id}. ")

    def checking_if_container_running(self, container: Any) -> None:
        self._line("Checking to see if it is running...")

    def container_running(self, container: Any) -> None:
        self._line("Container is running. Continuing.")

    def container_not_running(self, container: Any) -> None:
        self._partial("Container is not running. ")

    def starting_container(self, container: Any) -> None:
        self._line("Starting...")

    def container_started(self, container: Any) -> None:
        self._line("Container started. Continuing.")

    def waiting_for_container_to_be_ready(self, container: Any) -> None:
        self._line("Waiting for container to be ready...")

    def container_ready(self, container: Any) -> None:
        self._line("Container ready. Continuing.")

    def stopping_container(self, container: Any) -> None:
        self._line("Stopping...")

    def container_stopped(self, container: Any) -> None:
        self._partial(f"{container.name} stopped. ")

    def deleting_container(self, container: Any) -> None:
        self._line("Deleting...")

    def container_deleted(self, container: Any) -> None:
        self._line(f"{container.name} deleted.")

    def done(self) -> None:
        self._line("Done.")


class LoggingReporter(Reporter):
    """Forwards every event to the structured logger at debug level."""

    def report(self, event: ReporterEvent, *args: Any) -> None:
        logger.debug(
            "Container lifecycle",
            lifecycle_event=str(event),
            subjects=[_describe(a) for a in args],
        )


def _describe(value: Any) -> str:
    name = getattr(value, "name", None)
    if isinstance(name, str):
        return name
    return str(value)
