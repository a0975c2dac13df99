"""Container image and container lifecycle automation for build pipelines."""

from dockhand.container import ContainerSpec, Destroyer, Provisioner, destroy, provision
from dockhand.image import ImageTarget, build, publish, push, tag
from dockhand.reporter import LoggingReporter, NullReporter, PrintingReporter, Reporter

__all__ = [
    "ContainerSpec",
    "Destroyer",
    "ImageTarget",
    "LoggingReporter",
    "NullReporter",
    "PrintingReporter",
    "Provisioner",
    "Reporter",
    "build",
    "destroy",
    "provision",
    "publish",
    "push",
    "tag",
]
