"""Exceptions raised by dockhand.

Daemon failures are not wrapped: ``docker.errors.NotFound`` is handled at
container lookup and every other ``docker.errors.DockerException`` reaches
the caller unchanged.
"""

from __future__ import annotations


class DockhandError(Exception):
    """Base class for failures raised by dockhand itself."""


class StreamError(DockhandError):
    """The daemon reported an error in a build or push stream.

    ``str(exc)`` is exactly the text the daemon sent.
    """


class ImageNotFoundError(DockhandError):
    """No local image matched the repository being tagged or pushed."""


class ConfigurationError(DockhandError):
    """A required input was missing. Raised before any daemon call."""


class ContainerNotReadyError(DockhandError):
    """A readiness check failed or the container stopped while waiting."""
