"""Entry point for `python -m dockhand` / `dockhand`.

Subcommands:
    dockhand provision NAME --image IMAGE [-p H:C]... [-e K=V]... [--command CMD] [--ready-url URL]
    dockhand destroy NAME
    dockhand build IMAGE_NAME --repository-name NAME [--build-arg K=V]... [--platform P]
    dockhand tag IMAGE_NAME --repository-name NAME --repository-url URL -t TAG...
    dockhand push IMAGE_NAME --repository-url URL -t TAG...
    dockhand publish IMAGE_NAME --repository-name NAME --repository-url URL -t TAG...
"""

from __future__ import annotations

import argparse
import shlex
import sys

from docker.errors import DockerException

from dockhand.auth import Credentials
from dockhand.config import Settings, get_settings
from dockhand.container import ContainerSpec, destroy, provision
from dockhand.daemon import get_client
from dockhand.errors import ConfigurationError, DockhandError
from dockhand.image import ImageTarget, build, publish, push, tag
from dockhand.logger import install_excepthook, logger, set_level
from dockhand.readiness import http_ready
from dockhand.reporter import PrintingReporter

_IMAGE_COMMANDS = {"build": build, "tag": tag, "push": push, "publish": publish}


def _parse_pairs(values: list[str] | None, flag: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"Invalid {flag} value {item!r}, expected KEY=VALUE")
        pairs[key] = value
    return pairs


def _provision(args: argparse.Namespace, s: Settings) -> None:
    spec = ContainerSpec(
        name=args.name,
        image=args.image,
        ports=args.port or [],
        environment=_parse_pairs(args.env, "--env"),
        command=shlex.split(args.command_line) if args.command_line else None,
        ready=http_ready(args.ready_url, timeout=args.ready_timeout) if args.ready_url else None,
    )
    print(f"Provisioning {spec.name} container")
    provision(get_client(s.docker), spec, PrintingReporter())


def _destroy(args: argparse.Namespace, s: Settings) -> None:
    if not args.name:
        raise ConfigurationError("Container name is required")
    print(f"Destroying {args.name} container")
    destroy(get_client(s.docker), args.name, PrintingReporter())


def _image_target(args: argparse.Namespace, s: Settings) -> ImageTarget:
    return ImageTarget(
        image_name=args.image_name,
        repository_name=getattr(args, "repository_name", None) or args.image_name,
        repository_url=getattr(args, "repository_url", None),
        tags=getattr(args, "tags", None) or [],
        work_directory=args.work_directory or s.image.work_directory,
        build_args=_parse_pairs(getattr(args, "build_arg", None), "--build-arg") or None,
        platform=getattr(args, "platform", None) or s.image.platform,
        credentials=Credentials.from_config(s.registry),
    )


def _add_image_args(
    p: argparse.ArgumentParser,
    *,
    name: bool = False,
    url: bool = False,
    build_opts: bool = False,
) -> None:
    p.add_argument("image_name", help="Image name; the build context is WORK_DIR/IMAGE_NAME")
    p.add_argument("--work-directory", help="Directory holding staged build contexts")
    if name:
        p.add_argument("--repository-name", required=True, help="Local repository name")
    if url:
        p.add_argument("--repository-url", required=True, help="Remote repository URL")
        p.add_argument("-t", "--tag", dest="tags", action="append", required=True)
    if build_opts:
        p.add_argument("--build-arg", action="append", metavar="KEY=VALUE")
        p.add_argument("--platform", help="Target platform, e.g. linux/amd64")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dockhand",
        description="Build, tag and push images; provision and destroy containers",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("provision", help="Ensure a container exists and is running")
    p.add_argument("name")
    p.add_argument("--image", required=True)
    p.add_argument("-p", "--port", action="append", metavar="HOST:CONTAINER")
    p.add_argument("-e", "--env", action="append", metavar="KEY=VALUE")
    p.add_argument("--ready-url", help="Wait until this URL answers 200 after starting")
    p.add_argument("--ready-timeout", type=float, default=90)
    p.add_argument("--command", dest="command_line", help="Command to run, shell-quoted")

    p = sub.add_parser("destroy", help="Ensure a container is stopped and removed")
    p.add_argument("name")

    _add_image_args(
        sub.add_parser("build", help="Build an image"),
        name=True,
        build_opts=True,
    )
    _add_image_args(
        sub.add_parser("tag", help="Tag a built image for the repository"),
        name=True,
        url=True,
    )
    _add_image_args(sub.add_parser("push", help="Push tags to the repository"), url=True)
    _add_image_args(
        sub.add_parser("publish", help="Build, tag and push"),
        name=True,
        url=True,
        build_opts=True,
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    install_excepthook()
    args = _build_parser().parse_args(argv)
    s = get_settings()
    set_level(s.logging.level)

    try:
        match args.command:
            case "provision":
                _provision(args, s)
            case "destroy":
                _destroy(args, s)
            case "build" | "tag" | "push" | "publish":
                target = _image_target(args, s)
                _IMAGE_COMMANDS[args.command](get_client(s.docker), target)
    except (DockhandError, DockerException) as exc:
        logger.debug("Command failed", command=args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
