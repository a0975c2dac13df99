"""Shared test fixtures for dockhand."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from docker.errors import NotFound

from dockhand.config import reset_settings
from dockhand.reporter import Reporter, ReporterEvent

# ---------------------------------------------------------------------------
# Shared helpers (plain functions importable by test files, not fixtures)
# ---------------------------------------------------------------------------


class RecordingReporter(Reporter):
    """Captures every lifecycle event in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[ReporterEvent, tuple[Any, ...]]] = []

    def report(self, event: ReporterEvent, *args: Any) -> None:
        self.calls.append((event, args))

    @property
    def events(self) -> list[str]:
        return [str(event) for event, _ in self.calls]


def make_container(
    name: str = "web",
    status: str = "running",
    container_id: str = "c0ffee",
) -> MagicMock:
    """A stand-in for ``docker.models.containers.Container``."""
    container = MagicMock()
    container.name = name
    container.id = container_id
    container.status = status
    container.attrs = {"State": {"Status": status}}
    return container


def make_client(
    containers: dict[str, MagicMock] | None = None,
    images: list[Any] | None = None,
) -> MagicMock:
    """A stand-in for ``docker.DockerClient``.

    ``containers`` maps lookup keys (name or id) to containers; any other
    key raises the daemon's NotFound. ``images`` is what every image
    listing returns.
    """
    known = dict(containers or {})
    client = MagicMock()

    def get(key: str) -> MagicMock:
        if key in known:
            return known[key]
        raise NotFound(f"No such container: {key}")

    client.containers.get.side_effect = get
    client.images.list.return_value = list(images or [])
    return client


# ---------------------------------------------------------------------------
# Autouse fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()
