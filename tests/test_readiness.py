"""Tests for the HTTP readiness check, against an in-process aiohttp server."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from aiohttp import test_utils, web
from conftest import make_container

from dockhand.errors import ContainerNotReadyError
from dockhand.readiness import http_ready, wait_healthy


def _app(*statuses: int) -> web.Application:
    """An app whose /health answers each status in turn, then the last forever."""
    remaining = list(statuses)

    async def health(request: web.Request) -> web.Response:
        status = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return web.Response(status=status)

    app = web.Application()
    app.router.add_get("/health", health)
    return app


class TestWaitHealthy:
    async def test_returns_once_endpoint_is_healthy(self):
        container = make_container(name="web", status="running")
        async with test_utils.TestServer(_app(503, 503, 200)) as server:
            await wait_healthy(
                container, str(server.make_url("/health")), timeout=5, poll_interval=0.01
            )

    async def test_any_non_5xx_accepts_404(self):
        container = make_container(name="web", status="running")
        async with test_utils.TestServer(_app(404)) as server:
            await wait_healthy(
                container,
                str(server.make_url("/health")),
                timeout=5,
                poll_interval=0.01,
                any_non_5xx=True,
            )

    async def test_times_out_while_unhealthy(self):
        container = make_container(name="web", status="running")
        async with test_utils.TestServer(_app(503)) as server:
            with pytest.raises(TimeoutError, match="web"):
                await wait_healthy(
                    container, str(server.make_url("/health")), timeout=0.2, poll_interval=0.05
                )

    async def test_fails_fast_when_container_stops(self):
        container = make_container(name="web", status="exited")
        container.logs.return_value = b"panic: bad config\n"
        async with test_utils.TestServer(_app(503)) as server:
            with pytest.raises(ContainerNotReadyError, match="stopped"):
                await wait_healthy(
                    container, str(server.make_url("/health")), timeout=5, poll_interval=0.01
                )
        container.logs.assert_called_once_with(tail=30)


class TestHttpReady:
    def test_check_runs_wait_healthy_to_completion(self):
        container = make_container(name="web")
        check = http_ready("http://localhost:8080/health", timeout=3, poll_interval=0.5)

        with patch("dockhand.readiness.wait_healthy") as wait:

            async def done(*args, **kwargs):
                return None

            wait.side_effect = done
            assert check(container) is None

        wait.assert_called_once_with(
            container,
            "http://localhost:8080/health",
            timeout=3,
            poll_interval=0.5,
            headers=None,
            any_non_5xx=False,
        )
