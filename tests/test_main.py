"""Tests for the command line entry point."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from docker.errors import APIError

from dockhand.__main__ import main
from dockhand.container import ContainerSpec
from dockhand.errors import ImageNotFoundError
from dockhand.image import ImageTarget
from dockhand.reporter import PrintingReporter

_MAIN = "dockhand.__main__"


@pytest.fixture
def client():
    with patch(f"{_MAIN}.get_client") as get_client:
        yield get_client.return_value


class TestProvisionCommand:
    def test_builds_spec_from_arguments(self, client: MagicMock):
        with patch(f"{_MAIN}.provision") as provision:
            main(
                [
                    "provision",
                    "db",
                    "--image",
                    "postgres:15",
                    "-p",
                    "5432:5432",
                    "-e",
                    "POSTGRES_PASSWORD=secret",
                    "--command",
                    "postgres -c 'fsync=off'",
                ]
            )

        called_client, spec, reporter = provision.call_args.args
        assert called_client is client
        assert isinstance(spec, ContainerSpec)
        assert spec.name == "db"
        assert spec.ports == ["5432:5432"]
        assert spec.environment == {"POSTGRES_PASSWORD": "secret"}
        assert spec.command == ["postgres", "-c", "fsync=off"]
        assert spec.ready is None
        assert isinstance(reporter, PrintingReporter)

    def test_ready_url_installs_check(self, client: MagicMock):
        with patch(f"{_MAIN}.provision") as provision:
            main(["provision", "web", "--image", "nginx", "--ready-url", "http://localhost/"])
        assert callable(provision.call_args.args[1].ready)

    def test_bad_env_exits_before_connecting(self, capsys: pytest.CaptureFixture[str]):
        with patch(f"{_MAIN}.get_client") as get_client, pytest.raises(SystemExit) as exc_info:
            main(["provision", "web", "--image", "nginx", "-e", "NOVALUE"])
        assert exc_info.value.code == 1
        get_client.assert_not_called()
        assert "KEY=VALUE" in capsys.readouterr().err


class TestDestroyCommand:
    def test_destroys_named_container(self, client: MagicMock):
        with patch(f"{_MAIN}.destroy") as destroy:
            main(["destroy", "web"])
        assert destroy.call_args.args[:2] == (client, "web")

    def test_daemon_error_exits_with_message(
        self, client: MagicMock, capsys: pytest.CaptureFixture[str]
    ):
        with (
            patch(f"{_MAIN}.destroy", side_effect=APIError("conflict")),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["destroy", "web"])
        assert exc_info.value.code == 1
        assert "conflict" in capsys.readouterr().err


class TestImageCommands:
    def test_push_target(self, client: MagicMock):
        push_cmd = MagicMock()
        with patch.dict(f"{_MAIN}._IMAGE_COMMANDS", {"push": push_cmd}):
            main(["push", "my-app", "--repository-url", "registry.local/app", "-t", "1", "-t", "2"])

        called_client, target = push_cmd.call_args.args
        assert called_client is client
        assert isinstance(target, ImageTarget)
        assert target.repository_url == "registry.local/app"
        assert target.tags == ["1", "2"]
        assert target.credentials is None

    def test_build_target(self, client: MagicMock):
        build_cmd = MagicMock()
        with patch.dict(f"{_MAIN}._IMAGE_COMMANDS", {"build": build_cmd}):
            main(
                [
                    "build",
                    "my-app",
                    "--repository-name",
                    "org/my-app",
                    "--work-directory",
                    "out",
                    "--build-arg",
                    "VERSION=1",
                    "--platform",
                    "linux/arm64",
                ]
            )

        target = build_cmd.call_args.args[1]
        assert str(target.build_directory) == "out/my-app"
        assert target.repository_name == "org/my-app"
        assert target.build_args == {"VERSION": "1"}
        assert target.platform == "linux/arm64"

    def test_image_not_found_exits(self, client: MagicMock, capsys: pytest.CaptureFixture[str]):
        failing = MagicMock(side_effect=ImageNotFoundError("No image found for repository: 'x'"))
        with (
            patch.dict(f"{_MAIN}._IMAGE_COMMANDS", {"push": failing}),
            pytest.raises(SystemExit),
        ):
            main(["push", "my-app", "--repository-url", "x", "-t", "1"])
        assert "No image found for repository: 'x'" in capsys.readouterr().err
