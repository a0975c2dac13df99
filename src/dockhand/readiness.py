"""Ready-made readiness checks for :class:`~dockhand.container.ContainerSpec`.

The provisioner calls a readiness check exactly once; any polling happens
inside the check itself.
"""

from __future__ import annotations

import asyncio
import time

import aiohttp
from docker.models.containers import Container

from dockhand.errors import ContainerNotReadyError
from dockhand.logger import logger


def _is_running(container: Container) -> bool:
    container.reload()
    return container.status == "running"


async def wait_healthy(
    container: Container,
    url: str,
    timeout: float = 90,
    poll_interval: float = 1.0,
    headers: dict[str, str] | None = None,
    any_non_5xx: bool = False,
) -> None:
    """Poll an HTTP endpoint until it responds healthy, or raise on timeout.

    Args:
        any_non_5xx: When *False* (default) only ``200`` counts as healthy.
            When *True* any status below 500 is accepted, for servers
            that don't expose a dedicated health endpoint.
    """
    start = time.monotonic()
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    async with aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=5),
    ) as session:
        while loop.time() < deadline:
            try:
                async with session.get(url, headers=headers) as resp:
                    healthy = resp.status == 200 or (any_non_5xx and resp.status < 500)
                    if healthy:
                        elapsed_ms = (time.monotonic() - start) * 1000
                        logger.info(
                            "Health check passed",
                            container=container.name,
                            elapsed_ms=round(elapsed_ms),
                        )
                        return
            except (aiohttp.ClientError, OSError):
                pass  # not listening yet

            if not await asyncio.to_thread(_is_running, container):
                logs = await asyncio.to_thread(container.logs, tail=30)
                logger.error(
                    "Container exited",
                    container=container.name,
                    logs=logs.decode("utf-8", errors="replace")[-2000:],
                )
                msg = f"Container {container.name} stopped before becoming ready"
                raise ContainerNotReadyError(msg)

            await asyncio.sleep(poll_interval)

    msg = f"Container {container.name} did not become healthy within {timeout}s"
    raise TimeoutError(msg)


def http_ready(
    url: str,
    *,
    timeout: float = 90,
    poll_interval: float = 1.0,
    headers: dict[str, str] | None = None,
    any_non_5xx: bool = False,
):
    """Return a readiness check that blocks until *url* answers healthy."""

    def check(container: Container) -> None:
        asyncio.run(
            wait_healthy(
                container,
                url,
                timeout=timeout,
                poll_interval=poll_interval,
                headers=headers,
                any_non_5xx=any_non_5xx,
            )
        )

    return check
